"""Double-booking detection and court auto-assignment."""

from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence

from models.booking import Booking, BookingStatus
from models.court import Court


def blocking_statuses(completed_blocks: bool = False) -> FrozenSet[str]:
    """Statuses whose slots are unavailable to new bookings."""
    statuses = {BookingStatus.BOOKED, BookingStatus.ARRIVED, BookingStatus.CANCELLATION_REQUESTED}
    if completed_blocks:
        statuses.add(BookingStatus.COMPLETED)
    return frozenset(statuses)


def is_blocking(booking: Booking, completed_blocks: bool = False) -> bool:
    return booking.status in blocking_statuses(completed_blocks)


def conflicting_bookings(
    candidate_slots: Iterable[str],
    court_id: int,
    date: str,
    bookings: Iterable[Booking],
    completed_blocks: bool = False,
) -> List[Booking]:
    wanted = set(candidate_slots)
    hits = []
    for booking in bookings:
        if booking.court_id != court_id or booking.date != date:
            continue
        if not is_blocking(booking, completed_blocks):
            continue
        if wanted.intersection(booking.slots):
            hits.append(booking)
    return hits


def find_conflict(
    candidate_slots: Iterable[str],
    court_id: int,
    date: str,
    bookings: Iterable[Booking],
    completed_blocks: bool = False,
) -> bool:
    return bool(conflicting_bookings(candidate_slots, court_id, date, bookings, completed_blocks))


def find_available_court(
    candidate_slots: Sequence[str],
    date: str,
    courts: Iterable[Court],
    bookings: Iterable[Booking],
    completed_blocks: bool = False,
) -> Optional[Court]:
    # first free court in stored order; no load balancing
    bookings = list(bookings)
    for court in courts:
        if not find_conflict(candidate_slots, court.id, date, bookings, completed_blocks):
            return court
    return None


def occupancy(
    date: str,
    courts: Iterable[Court],
    time_slots: Sequence[str],
    bookings: Iterable[Booking],
    completed_blocks: bool = False,
) -> Dict[int, Dict[str, Optional[Booking]]]:
    """Map court id -> slot label -> occupying booking (or None) for one date."""
    grid = {court.id: {label: None for label in time_slots} for court in courts}
    for booking in bookings:
        if booking.date != date or booking.court_id not in grid:
            continue
        if not is_blocking(booking, completed_blocks):
            continue
        row = grid[booking.court_id]
        for label in booking.slots:
            if label in row:
                row[label] = booking
    return grid
