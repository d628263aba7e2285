from flask import request

from models.booking import BookingStatus
from models.court import court_name
from scheduling.pricing import booking_cost, booking_hours
from utils.errors import ValidationError


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def text_arg(data: dict, key: str, default: str = "") -> str:
    """String field from a JSON body; missing or null gives ``default``."""
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def booking_json(b, courts, court_rates=None, with_cost=False) -> dict:
    out = {
        "id": b.id,
        "court_id": b.court_id,
        "court_name": court_name(courts, b.court_id),
        "date": b.date,
        "time_slot": b.time_slot,
        "slots": b.slots,
        "customer_name": b.customer_name,
        "customer_phone": b.customer_phone,
        "status": b.status,
        "user_email": b.user_email,
        "created_at": b.created_at,
    }
    if with_cost:
        rates = court_rates or {}
        out["hours"] = booking_hours(b)
        out["rate"] = rates.get(b.court_id, 0)
        # cancelled bookings are never charged
        out["cost"] = None if b.status == BookingStatus.CANCELLED else booking_cost(b, rates)
    return out


def settings_json(snapshot) -> dict:
    return {
        "courts": [c.to_dict() for c in snapshot.courts],
        "time_slots": snapshot.time_slots,
        "rates": {str(k): v for k, v in snapshot.court_rates.items()},
    }


def user_json(u) -> dict:
    return {
        "id": u.id,
        "first_name": u.first_name,
        "last_name": u.last_name,
        "email": u.email,
        "phone": u.phone,
        "role": u.role,
    }
