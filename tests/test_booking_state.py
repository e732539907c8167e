"""Tests for the booking transition guard."""

from datetime import UTC, datetime, timedelta
from itertools import product

import pytest

from app.core.exceptions import TransitionRejected
from app.domain.booking_state import (
    BOOKING_TRANSITIONS,
    TERMINAL_STATUSES,
    ActorRole,
    BookingStatus,
    RejectionReason,
    assert_booking_transition,
    check_booking_transition,
    is_within_dispute_window,
)

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
RECENTLY = NOW - timedelta(days=1)


@pytest.mark.parametrize(
    "current,target,role",
    [
        ("pending", "confirmed", "professional"),
        ("pending", "rejected", "professional"),
        ("confirmed", "in_progress", "consumer"),
        ("confirmed", "in_progress", "professional"),
        ("confirmed", "cancelled", "consumer"),
        ("confirmed", "cancelled", "professional"),
        ("in_progress", "completed", "professional"),
        ("completed", "disputed", "consumer"),
        ("disputed", "resolved", "admin"),
    ],
)
def test_allowed_transitions(current, target, role):
    decision = check_booking_transition(current, target, role, completed_at=RECENTLY, now=NOW)

    assert decision.accepted
    assert decision.status == BookingStatus(target)


def test_every_status_role_combination_follows_the_table():
    for current, target, role in product(BookingStatus, BookingStatus, ActorRole):
        decision = check_booking_transition(current, target, role, completed_at=RECENTLY, now=NOW)

        if current in TERMINAL_STATUSES:
            assert decision.reason == RejectionReason.ALREADY_TERMINAL
        elif (current, target) not in BOOKING_TRANSITIONS:
            assert decision.reason == RejectionReason.INVALID_TRANSITION
        elif role not in BOOKING_TRANSITIONS[(current, target)]:
            assert decision.reason == RejectionReason.UNAUTHORIZED_ACTOR
        else:
            assert decision.accepted, (current, target, role)


def test_start_from_pending_is_invalid():
    decision = check_booking_transition("pending", "in_progress", "professional")

    assert not decision.accepted
    assert decision.reason == RejectionReason.INVALID_TRANSITION
    assert "pending" in decision.message


def test_in_progress_only_reachable_from_confirmed():
    sources = {current for current, target in BOOKING_TRANSITIONS if target == BookingStatus.IN_PROGRESS}
    assert sources == {BookingStatus.CONFIRMED}


def test_completed_only_reachable_from_in_progress():
    sources = {current for current, target in BOOKING_TRANSITIONS if target == BookingStatus.COMPLETED}
    assert sources == {BookingStatus.IN_PROGRESS}


@pytest.mark.parametrize("terminal", ["cancelled", "rejected", "resolved"])
def test_terminal_states_reject_everything(terminal):
    decision = check_booking_transition(terminal, "pending", "admin")

    assert decision.reason == RejectionReason.ALREADY_TERMINAL


def test_completed_is_not_terminal():
    assert BookingStatus.COMPLETED not in TERMINAL_STATUSES


def test_consumer_cannot_accept():
    decision = check_booking_transition("pending", "confirmed", "consumer")

    assert decision.reason == RejectionReason.UNAUTHORIZED_ACTOR


def test_admin_has_no_override_outside_disputes():
    decision = check_booking_transition("pending", "confirmed", "admin")

    assert decision.reason == RejectionReason.UNAUTHORIZED_ACTOR


def test_missing_actor_is_unauthorized():
    decision = check_booking_transition("confirmed", "cancelled", None)

    assert decision.reason == RejectionReason.UNAUTHORIZED_ACTOR


def test_unknown_status_raises_value_error():
    with pytest.raises(ValueError):
        check_booking_transition("archived", "pending", "admin")


class TestDisputeWindow:
    def test_dispute_inside_window(self):
        decision = check_booking_transition(
            "completed", "disputed", "consumer", completed_at=NOW - timedelta(days=6), now=NOW
        )
        assert decision.accepted

    def test_dispute_after_window_closed(self):
        decision = check_booking_transition(
            "completed", "disputed", "consumer", completed_at=NOW - timedelta(days=8), now=NOW
        )
        assert decision.reason == RejectionReason.INVALID_TRANSITION
        assert "window" in decision.message

    def test_custom_window(self):
        decision = check_booking_transition(
            "completed",
            "disputed",
            "consumer",
            completed_at=NOW - timedelta(days=2),
            dispute_window=timedelta(days=1),
            now=NOW,
        )
        assert decision.reason == RejectionReason.INVALID_TRANSITION

    def test_without_completion_time(self):
        assert not is_within_dispute_window(None, timedelta(days=7), NOW)

    def test_naive_completion_time_is_treated_as_utc(self):
        naive = (NOW - timedelta(hours=3)).replace(tzinfo=None)
        assert is_within_dispute_window(naive, timedelta(days=7), NOW)


class TestAssertBookingTransition:
    def test_returns_new_status(self):
        assert assert_booking_transition("pending", "confirmed", "professional") == BookingStatus.CONFIRMED

    def test_invalid_transition_maps_to_conflict(self):
        with pytest.raises(TransitionRejected) as exc_info:
            assert_booking_transition("pending", "completed", "professional")

        assert exc_info.value.status_code == 409
        assert exc_info.value.code == "InvalidTransition"

    def test_unauthorized_actor_maps_to_forbidden(self):
        with pytest.raises(TransitionRejected) as exc_info:
            assert_booking_transition("in_progress", "completed", "consumer")

        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "UnauthorizedActor"

    def test_already_terminal_maps_to_conflict(self):
        with pytest.raises(TransitionRejected) as exc_info:
            assert_booking_transition("rejected", "confirmed", "professional")

        assert exc_info.value.status_code == 409
        assert exc_info.value.reason == "AlreadyTerminal"
