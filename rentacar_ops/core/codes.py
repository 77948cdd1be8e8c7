"""Sequential business codes such as ``RS-00001`` and ``PM-00001``."""

from __future__ import annotations

from typing import Optional

RESERVATION_CODE_PREFIX = "RS"
PAYMENT_NUMBER_PREFIX = "PM"
CODE_DIGITS = 5


def next_sequence_code(prefix: str, latest: Optional[str], digits: int = CODE_DIGITS) -> str:
    """
    Return the code following ``latest``.

    Args:
        prefix: Code prefix without the dash, e.g. ``"RS"``.
        latest: The highest code currently in use, or ``None`` if there is none.
        digits: Zero padding width of the numeric part.

    Returns:
        ``"<prefix>-<n+1>"`` zero-padded; ``"<prefix>-00001"`` when ``latest`` is
        missing or has no numeric suffix.
    """
    number = 0
    if latest:
        _, _, suffix = latest.rpartition("-")
        if suffix.isdigit():
            number = int(suffix)
    return f"{prefix}-{number + 1:0{digits}d}"
