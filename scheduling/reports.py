"""Front-desk dashboard figures for a single day."""

from typing import List, Mapping, Sequence

from models.booking import Booking, BookingStatus
from models.court import Court
from scheduling.pricing import booking_hours, total_revenue

UPCOMING_LIMIT = 5


def daily_overview(
    date: str,
    bookings: Sequence[Booking],
    courts: Sequence[Court],
    court_rates: Mapping[int, float],
) -> dict:
    day = [b for b in bookings if b.date == date]

    active = [b for b in day if b.status in (BookingStatus.BOOKED, BookingStatus.ARRIVED)]
    arrived = [b for b in day if b.status == BookingStatus.ARRIVED]
    completed = [b for b in day if b.status == BookingStatus.COMPLETED]

    upcoming = sorted(
        (b for b in day if b.status == BookingStatus.BOOKED),
        key=lambda b: b.time_slot,
    )[:UPCOMING_LIMIT]

    return {
        "date": date,
        "total_bookings": len(active),
        "arrived_customers": len(arrived),
        "revenue": total_revenue(completed, court_rates),
        "upcoming": upcoming,
        "utilization": court_utilization(day, courts),
    }


def court_utilization(bookings: Sequence[Booking], courts: Sequence[Court]) -> List[dict]:
    counted = (BookingStatus.BOOKED, BookingStatus.ARRIVED, BookingStatus.COMPLETED)
    hours = {c.id: 0.0 for c in courts}
    for b in bookings:
        if b.status in counted and b.court_id in hours:
            hours[b.court_id] += booking_hours(b)
    return [{"court_id": c.id, "name": c.name, "hours": hours[c.id]} for c in courts]
