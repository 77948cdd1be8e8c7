"""Unit tests for the reservation status transition table."""

import pytest

from rentacar_ops.core.errors import ValidationError
from rentacar_ops.core.models.domain import ReservationStatus as S
from rentacar_ops.reservations import (
    ACTIVE_STATUSES,
    EDITABLE_STATUSES,
    TERMINAL_STATUSES,
    TRANSITIONS,
    ReservationAction as A,
    allowed_actions,
    can_transition,
    ensure_editable,
    ensure_transition,
)


class TestTransitionTable:
    @pytest.mark.parametrize(
        "action,current,target",
        [
            (A.assign_vehicle, S.RESERVED, S.CONFIRMED),
            (A.unassign_vehicle, S.CONFIRMED, S.RESERVED),
            (A.depart, S.CONFIRMED, S.DEPARTED),
            (A.return_vehicle, S.DEPARTED, S.RETURNED),
            (A.settle, S.RETURNED, S.SETTLED),
            (A.cancel, S.RESERVED, S.CANCELLED),
            (A.cancel, S.CONFIRMED, S.CANCELLED),
            (A.mark_no_show, S.RESERVED, S.NO_SHOW),
            (A.mark_no_show, S.CONFIRMED, S.NO_SHOW),
        ],
    )
    def test_allowed_transitions(self, action, current, target):
        assert can_transition(action, current)
        assert ensure_transition(action, current) == target

    @pytest.mark.parametrize(
        "action,current",
        [
            (A.assign_vehicle, S.CONFIRMED),
            (A.depart, S.RESERVED),
            (A.return_vehicle, S.CONFIRMED),
            (A.settle, S.DEPARTED),
            (A.cancel, S.DEPARTED),
            (A.cancel, S.CANCELLED),
            (A.unassign_vehicle, S.RESERVED),
        ],
    )
    def test_rejected_transitions(self, action, current):
        assert not can_transition(action, current)
        with pytest.raises(ValidationError) as exc_info:
            ensure_transition(action, current)

        assert current.value in exc_info.value.message

    def test_error_names_allowed_sources(self):
        with pytest.raises(ValidationError, match="allowed from: CONFIRMED, RESERVED"):
            ensure_transition(A.cancel, S.SETTLED)

    def test_accepts_plain_status_strings(self):
        assert ensure_transition(A.settle, "RETURNED") == S.SETTLED

    def test_terminal_statuses_have_no_way_out(self):
        for status in TERMINAL_STATUSES:
            assert allowed_actions(status) == []

    def test_every_target_is_a_known_status(self):
        for transition in TRANSITIONS.values():
            assert transition.target in set(S)


class TestStatusSets:
    def test_editable(self):
        assert EDITABLE_STATUSES == {S.RESERVED, S.CONFIRMED}
        ensure_editable(S.CONFIRMED)
        with pytest.raises(ValidationError):
            ensure_editable(S.DEPARTED)

    def test_active_statuses_hold_a_vehicle(self):
        assert ACTIVE_STATUSES == {S.RESERVED, S.CONFIRMED, S.DEPARTED}

    def test_allowed_actions_from_confirmed(self):
        assert allowed_actions(S.CONFIRMED) == [A.unassign_vehicle, A.depart, A.cancel, A.mark_no_show]
