from typing import Mapping, Sequence

from models.booking import Booking
from scheduling.slots import slot_minutes
from utils.errors import ValidationError


def booking_hours(booking: Booking) -> float:
    total = 0
    for label in booking.slots:
        try:
            total += slot_minutes(label)
        except ValidationError:
            # label from an older slot layout; count it as one hour
            total += 60
    return total / 60


def booking_cost(booking: Booking, court_rates: Mapping[int, float]) -> float:
    rate = court_rates.get(booking.court_id, 0) or 0
    return rate * booking_hours(booking)


def total_revenue(bookings: Sequence[Booking], court_rates: Mapping[int, float]) -> float:
    return sum(booking_cost(b, court_rates) for b in bookings)
