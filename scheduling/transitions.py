from models.booking import BookingStatus
from utils.errors import InvalidTransitionError, ValidationError

S = BookingStatus

ALLOWED_TRANSITIONS = {
    S.BOOKED: {S.ARRIVED, S.CANCELLATION_REQUESTED},
    # arrived -> booked undoes an arrival confirmed by mistake
    S.ARRIVED: {S.COMPLETED, S.BOOKED},
    S.CANCELLATION_REQUESTED: {S.CANCELLED, S.BOOKED},
    S.CANCELLED: set(),
    S.COMPLETED: set(),
}


def can_transition(current: str, new: str) -> bool:
    if current == new:
        return True
    return new in ALLOWED_TRANSITIONS.get(current, set())


def check_transition(current: str, new: str) -> None:
    if new not in BookingStatus.ALL:
        raise ValidationError(f"Unknown booking status '{new}'")
    if not can_transition(current, new):
        raise InvalidTransitionError(f"Cannot change booking from {current} to {new}")
