from datetime import date as date_cls

from flask import Blueprint, jsonify, g, request

from models.booking import BookingStatus
from models.court import court_name
from models.data_service import (
    check_date,
    complete_booking,
    get_booking,
    get_data,
    get_user_by_email,
    list_bookings,
    update_booking_status,
    update_court_settings,
)
from models.user import Role
from routes.serializers import booking_json, json_body, settings_json, text_arg, user_json
from scheduling.reports import daily_overview
from scheduling.slots import generate_time_slots
from security.rbac import require_roles
from utils.audit import log_event
from utils.notifications import DECISION_APPROVED, DECISION_REJECTED, notify_cancellation_decision

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


def _day_arg():
    return check_date(request.args.get("date") or date_cls.today().isoformat())


def _listing(statuses, day=None, with_cost=False, newest_first=False):
    snapshot = get_data()
    rows = list_bookings(status=statuses, date=day)
    rows.sort(key=lambda b: (b.date, b.time_slot), reverse=newest_first)
    return jsonify([
        booking_json(b, snapshot.courts, snapshot.court_rates, with_cost=with_cost)
        for b in rows
    ]), 200


def _set_status(booking_id: str, status: str, action: str):
    booking = update_booking_status(booking_id, status)
    log_event(action, user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"status": status})
    snapshot = get_data()
    return booking, booking_json(booking, snapshot.courts, snapshot.court_rates, with_cost=True)


@admin_bp.get("/dashboard")
@require_roles(Role.ADMIN)
def dashboard():
    day = _day_arg()
    snapshot = get_data()
    overview = daily_overview(day, snapshot.bookings, snapshot.courts, snapshot.court_rates)
    overview["upcoming"] = [booking_json(b, snapshot.courts) for b in overview["upcoming"]]
    return jsonify(overview), 200


@admin_bp.get("/bookings")
@require_roles(Role.ADMIN)
def all_bookings():
    status = request.args.get("status")
    day = request.args.get("date")
    return _listing([status] if status else None, check_date(day) if day else None)


# ---------- arrivals ----------
@admin_bp.get("/arrivals")
@require_roles(Role.ADMIN)
def arrivals():
    return _listing([BookingStatus.BOOKED], _day_arg())


@admin_bp.post("/bookings/<booking_id>/arrive")
@require_roles(Role.ADMIN)
def mark_arrived(booking_id: str):
    _, out = _set_status(booking_id, BookingStatus.ARRIVED, "BOOKING_ARRIVED")
    return jsonify(out), 200


@admin_bp.post("/bookings/<booking_id>/undo_arrival")
@require_roles(Role.ADMIN)
def undo_arrival(booking_id: str):
    if get_booking(booking_id).status != BookingStatus.ARRIVED:
        return jsonify(error="Booking is not marked as arrived"), 400
    _, out = _set_status(booking_id, BookingStatus.BOOKED, "BOOKING_ARRIVAL_UNDONE")
    return jsonify(out), 200


# ---------- payments ----------
@admin_bp.get("/payments")
@require_roles(Role.ADMIN)
def payments():
    return _listing([BookingStatus.ARRIVED], _day_arg(), with_cost=True)


@admin_bp.post("/bookings/<booking_id>/complete")
@require_roles(Role.ADMIN)
def take_payment(booking_id: str):
    booking = complete_booking(booking_id)
    snapshot = get_data()
    out = booking_json(booking, snapshot.courts, snapshot.court_rates, with_cost=True)
    log_event("BOOKING_COMPLETED", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"cost": out["cost"]})
    return jsonify(out), 200


# ---------- cancellations ----------
@admin_bp.get("/cancellations")
@require_roles(Role.ADMIN)
def cancellations():
    return _listing([BookingStatus.CANCELLATION_REQUESTED])


@admin_bp.post("/bookings/<booking_id>/cancellation")
@require_roles(Role.ADMIN)
def decide_cancellation(booking_id: str):
    data = json_body()
    decision = text_arg(data, "decision").strip().lower()
    if decision not in ("approve", "reject"):
        return jsonify(error="decision must be 'approve' or 'reject'"), 400

    if get_booking(booking_id).status != BookingStatus.CANCELLATION_REQUESTED:
        return jsonify(error="No pending cancellation request for this booking"), 400

    approved = decision == "approve"
    booking, out = _set_status(
        booking_id,
        BookingStatus.CANCELLED if approved else BookingStatus.BOOKED,
        "ADMIN_CANCELLATION_APPROVED" if approved else "ADMIN_CANCELLATION_REJECTED",
    )

    # the status change above stands even if the email fails
    owner = get_user_by_email(booking.user_email) if booking.user_email else None
    notification = notify_cancellation_decision(
        owner,
        booking,
        court_name(get_data().courts, booking.court_id),
        DECISION_APPROVED if approved else DECISION_REJECTED,
    )
    return jsonify(booking=out, notification=notification), 200


@admin_bp.post("/bookings/<booking_id>/status")
@require_roles(Role.ADMIN)
def change_status(booking_id: str):
    data = json_body()
    status = text_arg(data, "status").strip()
    if not status:
        return jsonify(error="status required"), 400
    _, out = _set_status(booking_id, status, "BOOKING_STATUS_CHANGE")
    return jsonify(out), 200


# ---------- history ----------
@admin_bp.get("/history")
@require_roles(Role.ADMIN)
def history():
    return _listing(
        [BookingStatus.COMPLETED, BookingStatus.CANCELLED],
        with_cost=True,
        newest_first=True,
    )


# ---------- settings ----------
@admin_bp.get("/settings")
@require_roles(Role.ADMIN)
def get_settings():
    return jsonify(settings_json(get_data())), 200


@admin_bp.put("/settings")
@require_roles(Role.ADMIN)
def put_settings():
    data = json_body()
    current = get_data()

    generate = data.get("generate")
    if isinstance(generate, dict):
        time_slots = generate_time_slots(
            generate.get("opening_time"),
            generate.get("closing_time"),
            generate.get("slot_minutes"),
        )
    else:
        time_slots = data.get("time_slots", current.time_slots)

    snapshot = update_court_settings(
        data.get("courts", [c.to_dict() for c in current.courts]),
        time_slots,
        data.get("rates", current.court_rates),
    )

    log_event(
        "SETTINGS_UPDATE",
        user_id=g.user.id,
        entity="settings",
        metadata={"courts": len(snapshot.courts), "time_slots": len(snapshot.time_slots)},
    )
    return jsonify(settings_json(snapshot)), 200


@admin_bp.get("/users")
@require_roles(Role.ADMIN)
def list_users():
    return jsonify([user_json(u) for u in get_data().users]), 200
