"""
Current user resolution and role hierarchy checks.

Authentication is not wired yet: ``get_current_user`` returns a fixed
development administrator. Services take a ``user_provider`` callable so a
real identity source can be plugged in without touching them.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Dict

from .core.errors import PermissionDeniedError
from .core.logging_config import get_logger
from .core.models.domain import CurrentUser, UserRole

logger = get_logger(__name__)

UserProvider = Callable[[], Awaitable[CurrentUser]]

# ADMIN > MANAGER > MEMBER
ROLE_HIERARCHY: Dict[UserRole, int] = {
    UserRole.ADMIN: 3,
    UserRole.MANAGER: 2,
    UserRole.MEMBER: 1,
}

DEV_USER = CurrentUser(
    id="stub-user-001",
    email="admin@example.com",
    name="Administrator (development)",
    role=UserRole.ADMIN,
)


async def get_current_user() -> CurrentUser:
    """Return the logged-in user. Always the development administrator for now."""
    return DEV_USER


def has_role(user: CurrentUser, required_role: UserRole | str) -> bool:
    """
    Check whether the user holds ``required_role`` or a higher one.

    Args:
        user: The acting user.
        required_role: Minimum role, as enum member or its string value.

    Returns:
        True when the user's rank is at least the required rank.
    """
    return ROLE_HIERARCHY[UserRole(user.role)] >= ROLE_HIERARCHY[UserRole(required_role)]


def require_role(user: CurrentUser, required_role: UserRole | str, message: str | None = None) -> None:
    """Raise ``PermissionDeniedError`` unless the user holds ``required_role`` or higher."""
    if not has_role(user, required_role):
        logger.warning(
            f"Permission denied: user={user.id} role={user.role.value} required={UserRole(required_role).value}"
        )
        raise PermissionDeniedError(message or "You do not have permission to perform this operation")
