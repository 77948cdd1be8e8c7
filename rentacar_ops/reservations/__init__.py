"""Reservation lifecycle: status transitions and the reservation service."""

from .service import ReservationService, ReservationServiceDeps
from .transitions import (
    ACTIVE_STATUSES,
    EDITABLE_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    ReservationAction,
    allowed_actions,
    can_transition,
    ensure_editable,
    ensure_transition,
)

__all__ = [
    "ACTIVE_STATUSES",
    "EDITABLE_STATUSES",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "ReservationAction",
    "ReservationService",
    "ReservationServiceDeps",
    "allowed_actions",
    "can_transition",
    "ensure_editable",
    "ensure_transition",
]
