"""Reservation status transitions.

Every status change a reservation can go through is listed in
``TRANSITIONS``; service methods ask ``ensure_transition`` for the target
status instead of carrying their own guard checks.

::

    RESERVED --assign_vehicle--> CONFIRMED --depart--> DEPARTED
       ^                            |                     |
       +------unassign_vehicle------+               return_vehicle
                                                          v
    RESERVED/CONFIRMED --cancel--> CANCELLED           RETURNED --settle--> SETTLED
    RESERVED/CONFIRMED --mark_no_show--> NO_SHOW
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, List, NamedTuple

from ..core.errors import ValidationError
from ..core.models.domain import ReservationStatus


class ReservationAction(str, Enum):
    assign_vehicle = "assign_vehicle"
    unassign_vehicle = "unassign_vehicle"
    depart = "depart"
    return_vehicle = "return_vehicle"
    settle = "settle"
    cancel = "cancel"
    mark_no_show = "mark_no_show"


class Transition(NamedTuple):
    sources: FrozenSet[ReservationStatus]
    target: ReservationStatus


TRANSITIONS: Dict[ReservationAction, Transition] = {
    ReservationAction.assign_vehicle: Transition(
        frozenset({ReservationStatus.RESERVED}), ReservationStatus.CONFIRMED
    ),
    ReservationAction.unassign_vehicle: Transition(
        frozenset({ReservationStatus.CONFIRMED}), ReservationStatus.RESERVED
    ),
    ReservationAction.depart: Transition(frozenset({ReservationStatus.CONFIRMED}), ReservationStatus.DEPARTED),
    ReservationAction.return_vehicle: Transition(
        frozenset({ReservationStatus.DEPARTED}), ReservationStatus.RETURNED
    ),
    ReservationAction.settle: Transition(frozenset({ReservationStatus.RETURNED}), ReservationStatus.SETTLED),
    ReservationAction.cancel: Transition(
        frozenset({ReservationStatus.RESERVED, ReservationStatus.CONFIRMED}), ReservationStatus.CANCELLED
    ),
    ReservationAction.mark_no_show: Transition(
        frozenset({ReservationStatus.RESERVED, ReservationStatus.CONFIRMED}), ReservationStatus.NO_SHOW
    ),
}

# Reservation details may only be edited before the vehicle leaves.
EDITABLE_STATUSES: FrozenSet[ReservationStatus] = frozenset({ReservationStatus.RESERVED, ReservationStatus.CONFIRMED})

# Statuses that hold a vehicle for their scheduled span.
ACTIVE_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.RESERVED, ReservationStatus.CONFIRMED, ReservationStatus.DEPARTED}
)

TERMINAL_STATUSES: FrozenSet[ReservationStatus] = frozenset(
    {ReservationStatus.SETTLED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW}
)


def _names(statuses: FrozenSet[ReservationStatus]) -> str:
    return ", ".join(sorted(status.value for status in statuses))


def can_transition(action: ReservationAction, current: ReservationStatus) -> bool:
    return ReservationStatus(current) in TRANSITIONS[action].sources


def ensure_transition(action: ReservationAction, current: ReservationStatus) -> ReservationStatus:
    """
    Return the status ``action`` moves a reservation to.

    Args:
        action: The lifecycle action being applied.
        current: The reservation's current status.

    Returns:
        The target status.

    Raises:
        ValidationError: ``action`` is not allowed from ``current``.
    """
    transition = TRANSITIONS[action]
    current = ReservationStatus(current)
    if current not in transition.sources:
        raise ValidationError(
            f"Cannot {action.value.replace('_', ' ')} a reservation in status {current.value}; "
            f"allowed from: {_names(transition.sources)}"
        )
    return transition.target


def ensure_editable(current: ReservationStatus) -> None:
    """Raise ``ValidationError`` unless the reservation may still be edited."""
    current = ReservationStatus(current)
    if current not in EDITABLE_STATUSES:
        raise ValidationError(
            f"A reservation in status {current.value} cannot be edited; editable in: {_names(EDITABLE_STATUSES)}"
        )


def allowed_actions(current: ReservationStatus) -> List[ReservationAction]:
    """List the actions available from ``current``, in declaration order."""
    current = ReservationStatus(current)
    return [action for action, transition in TRANSITIONS.items() if current in transition.sources]
