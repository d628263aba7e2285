from models.booking import Booking, BookingStatus
from models.court import Court
from scheduling.pricing import booking_cost, booking_hours
from scheduling.reports import daily_overview

DAY = "2024-06-01"
COURTS = [Court(1, "Court 1"), Court(2, "Court 2")]
RATES = {1: 20, 2: 30}


def _b(booking_id, court_id, time_slot, status, date=DAY):
    return Booking(booking_id, court_id, date, time_slot, "Kim", "123", status)


def test_cost_is_rate_times_hours():
    b = _b("x", 2, "14:00 - 15:00 & 15:00 - 16:00", BookingStatus.ARRIVED)
    assert booking_hours(b) == 2
    assert booking_cost(b, RATES) == 60


def test_half_hour_slots_and_missing_rate():
    b = _b("x", 7, "18:00 - 18:30", BookingStatus.ARRIVED)
    assert booking_hours(b) == 0.5
    assert booking_cost(b, RATES) == 0


def test_daily_overview():
    bookings = [
        _b("1", 1, "10:00 - 11:00", BookingStatus.BOOKED),
        _b("2", 1, "09:00 - 10:00", BookingStatus.BOOKED),
        _b("3", 2, "09:00 - 10:00", BookingStatus.ARRIVED),
        _b("4", 2, "11:00 - 12:00 & 12:00 - 13:00", BookingStatus.COMPLETED),
        _b("5", 1, "12:00 - 13:00", BookingStatus.CANCELLED),
        _b("6", 1, "12:00 - 13:00", BookingStatus.COMPLETED, date="2024-06-02"),
    ]

    overview = daily_overview(DAY, bookings, COURTS, RATES)

    assert overview["total_bookings"] == 3
    assert overview["arrived_customers"] == 1
    assert overview["revenue"] == 60
    assert [b.id for b in overview["upcoming"]] == ["2", "1"]
    assert overview["utilization"] == [
        {"court_id": 1, "name": "Court 1", "hours": 2.0},
        {"court_id": 2, "name": "Court 2", "hours": 3.0},
    ]
