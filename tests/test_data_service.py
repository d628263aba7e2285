import threading

import pytest

from models import data_service as ds
from models.booking import BookingStatus
from models.court import court_name
from utils.errors import ConflictError, InvalidTransitionError, NotFoundError, ValidationError

DAY = "2024-06-01"


def _book(court_id, slots, name="Kim Park", phone="555-0100", **kwargs):
    return ds.add_booking(court_id, DAY, slots, name, phone, **kwargs)


def test_scenario_overlapping_range_is_rejected(app_ctx):
    _book(1, ["09:00 - 10:00"])

    with pytest.raises(ConflictError):
        _book(1, ["09:00 - 10:00", "10:00 - 11:00"])

    assert len(ds.get_data().bookings) == 1


def test_scenario_multi_slot_booking_on_empty_schedule(app_ctx):
    booking = _book(2, ["14:00 - 15:00", "15:00 - 16:00"])

    assert booking.time_slot == "14:00 - 15:00 & 15:00 - 16:00"
    assert booking.status == BookingStatus.BOOKED
    assert booking.id
    assert ds.get_booking(booking.id) == booking


def test_ids_are_unique(app_ctx):
    a = _book(1, ["09:00 - 10:00"])
    b = _book(1, ["10:00 - 11:00"])
    assert a.id != b.id


def test_scenario_cancelled_booking_frees_the_slot(app_ctx):
    first = _book(1, ["18:00 - 19:00"])
    ds.update_booking_status(first.id, BookingStatus.CANCELLATION_REQUESTED)

    with pytest.raises(ConflictError):
        _book(1, ["18:00 - 19:00"])

    ds.update_booking_status(first.id, BookingStatus.CANCELLED)
    second = _book(1, ["18:00 - 19:00"])
    assert second.status == BookingStatus.BOOKED


def test_completed_booking_policy(app):
    with app.app_context():
        first = _book(1, ["11:00 - 12:00"])
        ds.update_booking_status(first.id, BookingStatus.ARRIVED)
        ds.complete_booking(first.id)

        app.config["COMPLETED_BOOKINGS_BLOCK_SLOTS"] = True
        with pytest.raises(ConflictError):
            _book(1, ["11:00 - 12:00"])

        app.config["COMPLETED_BOOKINGS_BLOCK_SLOTS"] = False
        assert _book(1, ["11:00 - 12:00"]).status == BookingStatus.BOOKED


def test_non_contiguous_and_unknown_slots_are_rejected(app_ctx):
    with pytest.raises(ValidationError):
        _book(1, ["09:00 - 10:00", "11:00 - 12:00"])
    with pytest.raises(ValidationError):
        _book(1, ["07:00 - 08:00"])


def test_invalid_input_is_rejected_before_any_write(app_ctx):
    with pytest.raises(ValidationError):
        ds.add_booking(1, "01/06/2024", ["09:00 - 10:00"], "Kim", "1")
    with pytest.raises(ValidationError):
        ds.add_booking(1, DAY, ["09:00 - 10:00"], "K", "1")
    with pytest.raises(ValidationError):
        ds.add_booking(1, DAY, ["09:00 - 10:00"], "Kim", " ")
    with pytest.raises(NotFoundError):
        ds.add_booking(99, DAY, ["09:00 - 10:00"], "Kim", "1")
    assert ds.get_data().bookings == []


def test_auto_assign_picks_first_free_court(app_ctx):
    _book(1, ["09:00 - 10:00"])
    _book(2, ["10:00 - 11:00"])

    booking = ds.add_booking_auto(DAY, ["09:00 - 10:00", "10:00 - 11:00"], "Kim Park", "1")
    assert booking.court_id == 3


def test_auto_assign_fails_when_all_courts_taken(app_ctx):
    for court_id in (1, 2, 3, 4):
        _book(court_id, ["20:00 - 21:00"])

    with pytest.raises(ConflictError):
        ds.add_booking_auto(DAY, ["20:00 - 21:00"], "Kim Park", "1")


def test_update_status_is_idempotent(app_ctx):
    booking = _book(1, ["09:00 - 10:00"])

    once = ds.update_booking_status(booking.id, BookingStatus.ARRIVED)
    twice = ds.update_booking_status(booking.id, BookingStatus.ARRIVED)

    assert once == twice
    assert twice.status == BookingStatus.ARRIVED


def test_update_status_errors(app_ctx):
    booking = _book(1, ["09:00 - 10:00"])

    with pytest.raises(NotFoundError):
        ds.update_booking_status("missing", BookingStatus.ARRIVED)
    with pytest.raises(InvalidTransitionError):
        ds.complete_booking(booking.id)

    ds.update_booking_status(booking.id, BookingStatus.ARRIVED)
    ds.complete_booking(booking.id)
    with pytest.raises(InvalidTransitionError):
        ds.update_booking_status(booking.id, BookingStatus.BOOKED)

    assert ds.get_booking(booking.id).status == BookingStatus.COMPLETED


def test_court_settings_round_trip(app_ctx):
    courts = [{"id": 1, "name": "Center"}, {"id": 7, "name": "Annex"}]
    slots = ["08:00 - 09:30", "09:30 - 11:00"]
    rates = {1: 25, 7: 12.5}

    ds.update_court_settings(courts, slots, rates)
    snapshot = ds.get_data()

    assert [c.to_dict() for c in snapshot.courts] == courts
    assert snapshot.time_slots == slots
    assert snapshot.court_rates == rates


@pytest.mark.parametrize("courts,slots,rates", [
    ([], ["09:00 - 10:00"], {}),
    ([{"id": 1, "name": "A"}], [], {}),
    ([{"id": 1, "name": "A"}, {"id": 1, "name": "B"}], ["09:00 - 10:00"], {}),
    ([{"id": 1, "name": "A"}], ["09:00-10:00"], {}),
    ([{"id": 1, "name": "A"}], ["09:00 - 10:00", "09:00 - 10:00"], {}),
    ([{"id": 1, "name": "A"}], ["09:00 - 10:00"], {1: -5}),
    ([{"id": 1, "name": "A"}], ["09:00 - 10:00"], {"x": 5}),
])
def test_court_settings_validation(app_ctx, courts, slots, rates):
    with pytest.raises(ValidationError):
        ds.update_court_settings(courts, slots, rates)


def test_scenario_removed_court_leaves_booking_readable(app_ctx):
    booking = _book(4, ["09:00 - 10:00"])

    ds.update_court_settings(
        [{"id": 1, "name": "Court 1"}],
        ds.get_data().time_slots,
        {1: 20},
    )

    snapshot = ds.get_data()
    [stored] = snapshot.bookings
    assert stored.id == booking.id
    assert stored.court_id == 4
    assert court_name(snapshot.courts, stored.court_id) == "Unknown"


def test_concurrent_bookings_for_one_slot_admit_exactly_one(app):
    results = []

    def worker(n):
        with app.app_context():
            try:
                ds.add_booking(1, DAY, ["12:00 - 13:00"], f"Guest {n}", "555")
                results.append("ok")
            except ConflictError:
                results.append("conflict")

    with app.app_context():
        ds.get_data()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == 7
    with app.app_context():
        assert len(ds.get_data().bookings) == 1


def test_users(app_ctx):
    user = ds.add_user("Pat", "Lee", "Pat@Example.com", "555", "hash")
    assert user.email == "pat@example.com"
    assert ds.get_user_by_email("PAT@example.com").id == user.id

    with pytest.raises(ConflictError):
        ds.add_user("Pat", "Lee", "pat@example.com", "555", "hash")

    updated = ds.update_user_profile(user.id, "Patricia", "Lee", "556")
    assert updated.first_name == "Patricia"
    assert ds.get_user_by_id(user.id).phone == "556"

    with pytest.raises(NotFoundError):
        ds.update_user_profile("nobody", "A", "B", "1")

    promoted = ds.set_user_role("pat@example.com", "admin")
    assert promoted.is_admin


def test_bookings_for_user_newest_first(app_ctx):
    ds.add_booking(1, "2024-06-01", ["09:00 - 10:00"], "Pat Lee", "5", user_email="pat@example.com")
    ds.add_booking(1, "2024-06-03", ["09:00 - 10:00"], "Pat Lee", "5", user_email="pat@example.com")
    ds.add_booking(2, "2024-06-02", ["09:00 - 10:00"], "Sam Ng", "6", user_email="sam@example.com")

    dates = [b.date for b in ds.bookings_for_user("pat@example.com")]
    assert dates == ["2024-06-03", "2024-06-01"]


def test_created_at_is_utc_with_offset(app_ctx):
    booking = _book(1, ["09:00 - 10:00"])
    assert booking.created_at.endswith("+00:00")
