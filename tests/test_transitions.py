import pytest

from models.booking import BookingStatus as S
from scheduling.transitions import can_transition, check_transition
from utils.errors import InvalidTransitionError, ValidationError


@pytest.mark.parametrize("current,new", [
    (S.BOOKED, S.ARRIVED),
    (S.ARRIVED, S.COMPLETED),
    (S.ARRIVED, S.BOOKED),
    (S.BOOKED, S.CANCELLATION_REQUESTED),
    (S.CANCELLATION_REQUESTED, S.CANCELLED),
    (S.CANCELLATION_REQUESTED, S.BOOKED),
])
def test_lifecycle_transitions_are_allowed(current, new):
    assert can_transition(current, new)
    check_transition(current, new)


@pytest.mark.parametrize("current,new", [
    (S.COMPLETED, S.BOOKED),
    (S.CANCELLED, S.BOOKED),
    (S.BOOKED, S.COMPLETED),
    (S.BOOKED, S.CANCELLED),
    (S.ARRIVED, S.CANCELLATION_REQUESTED),
])
def test_illegal_transitions_are_rejected(current, new):
    assert not can_transition(current, new)
    with pytest.raises(InvalidTransitionError):
        check_transition(current, new)


@pytest.mark.parametrize("status", S.ALL)
def test_same_status_is_a_no_op(status):
    check_transition(status, status)


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError):
        check_transition(S.BOOKED, "paid")
