from datetime import date as date_cls

from flask import Blueprint, request, jsonify, current_app, g

from models.booking import BookingStatus
from models.data_service import (
    add_booking,
    add_booking_auto,
    bookings_for_user,
    check_date,
    get_booking,
    get_data,
    update_booking_status,
)
from routes.serializers import booking_json, json_body, settings_json, text_arg
from scheduling.conflicts import occupancy
from scheduling.slots import compute_slot_range, slot_range_for_times, split_stored_slots
from utils.audit import log_event
from utils.auth_context import login_required
from utils.errors import ConflictError, ValidationError

booking_bp = Blueprint("booking", __name__)


def _requested_slots(data: dict, ordered_slots):
    """
    Accepts, in order of precedence: start_time/end_time clock times,
    start_slot/end_slot labels, a time_slots list, or a single time_slot
    (which may already be " & "-joined).
    """
    if data.get("start_time") or data.get("end_time"):
        return slot_range_for_times(data.get("start_time"), data.get("end_time"), ordered_slots)
    if data.get("start_slot") or data.get("end_slot"):
        return compute_slot_range(data.get("start_slot"), data.get("end_slot"), ordered_slots)
    if isinstance(data.get("time_slots"), list):
        return data["time_slots"]
    if isinstance(data.get("time_slot"), str):
        return split_stored_slots(data["time_slot"])
    raise ValidationError("time_slot, time_slots, start_slot/end_slot or start_time/end_time required")


def _requested_court(data: dict):
    court_id = data.get("court_id")
    if court_id in (None, ""):
        return None
    try:
        return int(court_id)
    except (TypeError, ValueError):
        raise ValidationError("court_id must be an integer")


# ---------- ANY ROLE: facility info ----------
@booking_bp.get("/courts")
@login_required
def list_courts():
    return jsonify(settings_json(get_data())), 200


# ---------- ANY ROLE: schedule grid ----------
@booking_bp.get("/schedule")
@login_required
def schedule():
    day = check_date(request.args.get("date") or date_cls.today().isoformat())
    snapshot = get_data()
    grid = occupancy(
        day,
        snapshot.courts,
        snapshot.time_slots,
        snapshot.bookings,
        current_app.config.get("COMPLETED_BOOKINGS_BLOCK_SLOTS", False),
    )

    def _cell(booking):
        if booking is None:
            return None
        if g.user.is_admin or booking.user_email == g.user.email:
            return booking_json(booking, snapshot.courts)
        # other customers' details stay private
        return {"status": booking.status}

    return jsonify(
        date=day,
        time_slots=snapshot.time_slots,
        courts=[
            {
                "id": c.id,
                "name": c.name,
                "slots": [
                    {
                        "time_slot": label,
                        "available": grid[c.id][label] is None,
                        "booking": _cell(grid[c.id][label]),
                    }
                    for label in snapshot.time_slots
                ],
            }
            for c in snapshot.courts
        ],
    ), 200


# ---------- ANY ROLE: create booking (single, range or auto-assigned court) ----------
@booking_bp.post("/bookings")
@login_required
def create_booking():
    data = json_body()
    day = check_date(data.get("date"))
    snapshot = get_data()
    slots = _requested_slots(data, snapshot.time_slots)
    court_id = _requested_court(data)

    if g.user.is_admin:
        customer_name = text_arg(data, "customer_name")
        customer_phone = text_arg(data, "customer_phone")
        user_email = text_arg(data, "user_email", None)
    else:
        # users can only book for themselves
        customer_name = g.user.full_name
        customer_phone = g.user.phone
        user_email = g.user.email

    try:
        if court_id is None:
            booking = add_booking_auto(day, slots, customer_name, customer_phone, user_email)
        else:
            booking = add_booking(court_id, day, slots, customer_name, customer_phone, user_email)
    except ConflictError:
        log_event(
            "BOOKING_FAIL_CONFLICT",
            user_id=g.user.id,
            entity="court",
            entity_id=court_id,
            metadata={"date": day, "slots": list(slots)},
        )
        raise

    log_event(
        "BOOKING_CREATE",
        user_id=g.user.id,
        entity="booking",
        entity_id=booking.id,
        metadata={"court_id": booking.court_id, "date": day, "time_slot": booking.time_slot},
    )
    return jsonify(booking_json(booking, get_data().courts)), 201


# ---------- USERS: my bookings ----------
@booking_bp.get("/bookings/me")
@login_required
def my_bookings():
    courts = get_data().courts
    return jsonify([booking_json(b, courts) for b in bookings_for_user(g.user.email)]), 200


# ---------- USERS: request cancellation of own booking ----------
@booking_bp.post("/bookings/<booking_id>/cancel_request")
@login_required
def request_cancellation(booking_id: str):
    booking = get_booking(booking_id)
    if booking.user_email != g.user.email:
        return jsonify(error="Booking not found"), 404

    if booking.status != BookingStatus.BOOKED:
        return jsonify(error="Booking not cancellable"), 400

    booking = update_booking_status(booking_id, BookingStatus.CANCELLATION_REQUESTED)

    log_event("BOOKING_CANCEL_REQUEST", user_id=g.user.id, entity="booking", entity_id=booking.id)
    return jsonify(booking_json(booking, get_data().courts)), 200
