"""Default event handlers."""

from __future__ import annotations

from ..core.logging_config import get_logger
from ..core.models.domain import DomainEventType
from .event_bus import EventBus, EventPayload

logger = get_logger(__name__)


def _subject(payload: EventPayload) -> str:
    for key in ("reservation", "payment", "history"):
        record = payload.get(key)
        if record is None:
            continue
        for attr in ("reservation_code", "payment_number", "file_name"):
            value = getattr(record, attr, None)
            if value:
                return str(value)
    return "-"


async def audit_log_handler(event_type: DomainEventType, payload: EventPayload) -> None:
    """Write one INFO line per event: type, subject and acting user."""
    logger.info(f"[audit] {event_type.value} subject={_subject(payload)} user={payload.get('user_id', '-')}")


def register_default_handlers(bus: EventBus) -> None:
    """Attach the audit log handler to every event type once."""
    for event_type in DomainEventType:
        if audit_log_handler not in bus.handlers(event_type):
            bus.on(event_type, audit_log_handler)
