"""Read/modify/write operations against the JSON document store."""

import logging
import numbers
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from flask import current_app

from models.booking import Booking, BookingStatus
from models.court import Court, find_court
from models.db import db
from models.user import Role, User
from scheduling.conflicts import find_available_court, find_conflict
from scheduling.slots import SlotRange, join_slots, parse_slot_label
from scheduling.transitions import check_transition
from security.password import hash_password
from utils.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SLOT_TAKEN = "This time slot is no longer available. Please select another time."
NO_COURT_FREE = "No court is available for the selected time."


@dataclass
class StoreSnapshot:
    bookings: List[Booking] = field(default_factory=list)
    courts: List[Court] = field(default_factory=list)
    time_slots: List[str] = field(default_factory=list)
    court_rates: Dict[int, float] = field(default_factory=dict)
    users: List[User] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict) -> "StoreSnapshot":
        return cls(
            bookings=[Booking.from_dict(b) for b in doc["bookings"]],
            courts=[Court.from_dict(c) for c in doc["courts"]],
            time_slots=list(doc["timeSlots"]),
            court_rates={int(k): v for k, v in doc["courtRates"].items()},
            users=[User.from_dict(u) for u in doc["users"]],
        )


def _completed_blocks() -> bool:
    return bool(current_app.config.get("COMPLETED_BOOKINGS_BLOCK_SLOTS", False))


def _normalize_email(email: str) -> str:
    if email is None:
        return ""
    if not isinstance(email, str):
        raise ValidationError("Invalid email")
    return email.strip().lower()


def check_date(value: str) -> str:
    try:
        datetime.strptime(value or "", "%Y-%m-%d")
    except (TypeError, ValueError):
        raise ValidationError("Invalid date. Use YYYY-MM-DD")
    return value


def get_data() -> StoreSnapshot:
    return StoreSnapshot.from_document(db.read())


# ---------- bookings ----------

def get_booking(booking_id: str) -> Booking:
    for raw in db.read()["bookings"]:
        if raw["id"] == booking_id:
            return Booking.from_dict(raw)
    raise NotFoundError("Booking not found")


def list_bookings(status: Optional[Iterable[str]] = None, date: Optional[str] = None) -> List[Booking]:
    statuses = set(status) if status else None
    out = []
    for booking in get_data().bookings:
        if statuses is not None and booking.status not in statuses:
            continue
        if date is not None and booking.date != date:
            continue
        out.append(booking)
    return out


def bookings_for_user(email: str) -> List[Booking]:
    email = _normalize_email(email)
    rows = [b for b in get_data().bookings if b.user_email == email]
    # newest date first, later slots first within a day
    return sorted(rows, key=lambda b: (b.date, b.time_slot), reverse=True)


def _check_customer(name: str, phone: str):
    if not isinstance(name, str) or not isinstance(phone, str):
        raise ValidationError("Customer name and phone must be text.")
    if len(name.strip()) < 2:
        raise ValidationError("Name must be at least 2 characters.")
    if not phone.strip():
        raise ValidationError("Phone number is required.")


def _check_slots(slots):
    if not isinstance(slots, (list, tuple)):
        raise ValidationError("Time slots must be a list")


def _append_booking(doc: dict, court_id: int, date: str, labels: Sequence[str],
                    customer_name: str, customer_phone: str, user_email: Optional[str]) -> Booking:
    booking = Booking(
        id=uuid.uuid4().hex,
        court_id=court_id,
        date=date,
        time_slot=join_slots(labels),
        customer_name=customer_name.strip(),
        customer_phone=customer_phone.strip(),
        status=BookingStatus.BOOKED,
        user_email=_normalize_email(user_email) or None,
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )
    doc["bookings"].append(booking.to_dict())
    return booking


def add_booking(court_id: int, date: str, slots: Sequence[str], customer_name: str,
                customer_phone: str, user_email: Optional[str] = None) -> Booking:
    """
    Create a booking in status ``booked``.

    The conflict check runs against the document as read under the store
    lock, so a slot taken since the caller last looked is rejected here.
    """
    check_date(date)
    _check_customer(customer_name, customer_phone)
    _check_slots(slots)

    with db.transaction() as doc:
        snapshot = StoreSnapshot.from_document(doc)
        if find_court(snapshot.courts, court_id) is None:
            raise NotFoundError("Court not found")

        labels = SlotRange.from_labels(slots, snapshot.time_slots).labels(snapshot.time_slots)
        if find_conflict(labels, court_id, date, snapshot.bookings, _completed_blocks()):
            logger.info("Conflict booking court %s on %s for %s", court_id, date, labels)
            raise ConflictError(SLOT_TAKEN)

        return _append_booking(doc, court_id, date, labels, customer_name, customer_phone, user_email)


def add_booking_auto(date: str, slots: Sequence[str], customer_name: str,
                     customer_phone: str, user_email: Optional[str] = None) -> Booking:
    """Book the first court, in stored order, that is free for every slot."""
    check_date(date)
    _check_customer(customer_name, customer_phone)
    _check_slots(slots)

    with db.transaction() as doc:
        snapshot = StoreSnapshot.from_document(doc)
        labels = SlotRange.from_labels(slots, snapshot.time_slots).labels(snapshot.time_slots)
        court = find_available_court(labels, date, snapshot.courts, snapshot.bookings, _completed_blocks())
        if court is None:
            raise ConflictError(NO_COURT_FREE)

        return _append_booking(doc, court.id, date, labels, customer_name, customer_phone, user_email)


def update_booking_status(booking_id: str, new_status: str) -> Booking:
    with db.transaction() as doc:
        for raw in doc["bookings"]:
            if raw["id"] != booking_id:
                continue
            check_transition(raw.get("status", BookingStatus.BOOKED), new_status)
            raw["status"] = new_status
            return Booking.from_dict(raw)
        raise NotFoundError("Booking not found")


def complete_booking(booking_id: str) -> Booking:
    return update_booking_status(booking_id, BookingStatus.COMPLETED)


# ---------- facility settings ----------

def _coerce_courts(courts: Iterable) -> List[Court]:
    if not isinstance(courts, (list, tuple)):
        raise ValidationError("Courts must be a list")
    out = []
    for item in courts:
        if isinstance(item, Court):
            court = item
        else:
            try:
                court = Court.from_dict(item)
            except (KeyError, TypeError, ValueError):
                raise ValidationError("Each court needs an integer id and a name")
        if not court.name.strip():
            raise ValidationError("Court name required")
        out.append(court)
    if not out:
        raise ValidationError("Cannot save without any courts.")
    if len({c.id for c in out}) != len(out):
        raise ValidationError("Court ids must be unique")
    return out


def _coerce_time_slots(time_slots: Iterable[str]) -> List[str]:
    if not isinstance(time_slots, (list, tuple)):
        raise ValidationError("Time slots must be a list")
    labels = list(time_slots)
    if not labels:
        raise ValidationError("Cannot save without any time slots.")
    for label in labels:
        parse_slot_label(label)
    if len(set(labels)) != len(labels):
        raise ValidationError("Time slots must be unique")
    return labels


def _coerce_rates(rates: Mapping) -> Dict[int, float]:
    if not isinstance(rates, dict):
        raise ValidationError("Rates must be an object keyed by court id")
    out = {}
    for key, value in rates.items():
        try:
            court_id = int(key)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid court id '{key}' in rates")
        if isinstance(value, bool) or not isinstance(value, numbers.Real) or value < 0:
            raise ValidationError(f"Rate for court {court_id} must be a non-negative number")
        out[court_id] = value
    return out


def update_court_settings(courts: Iterable, time_slots: Iterable[str], rates: Mapping) -> StoreSnapshot:
    """
    Replace courts, the slot sequence and rates wholesale. Existing bookings
    are left untouched even if they reference removed courts or slots.
    """
    new_courts = _coerce_courts(courts)
    new_slots = _coerce_time_slots(time_slots)
    new_rates = _coerce_rates(rates)

    with db.transaction() as doc:
        doc["courts"] = [c.to_dict() for c in new_courts]
        doc["timeSlots"] = new_slots
        doc["courtRates"] = {str(k): v for k, v in new_rates.items()}
        return StoreSnapshot.from_document(doc)


# ---------- users ----------

def get_user_by_email(email: str) -> Optional[User]:
    email = _normalize_email(email)
    for raw in db.read()["users"]:
        if raw.get("email") == email:
            return User.from_dict(raw)
    return None


def get_user_by_id(user_id: str) -> Optional[User]:
    for raw in db.read()["users"]:
        if raw.get("id") == user_id:
            return User.from_dict(raw)
    return None


def add_user(first_name: str, last_name: str, email: str, phone: str,
             password_hash: str, role: str = Role.USER) -> User:
    email = _normalize_email(email)
    if role not in Role.ALL:
        raise ValidationError(f"Unknown role '{role}'")

    with db.transaction() as doc:
        if any(u.get("email") == email for u in doc["users"]):
            raise ConflictError("Email already exists.")
        user = User(
            id=uuid.uuid4().hex,
            first_name=(first_name or "").strip(),
            last_name=(last_name or "").strip(),
            email=email,
            phone=(phone or "").strip(),
            password=password_hash,
            role=role,
        )
        doc["users"].append(user.to_dict())
        return user


def _update_user(match, **changes) -> User:
    with db.transaction() as doc:
        for raw in doc["users"]:
            if match(raw):
                raw.update(changes)
                return User.from_dict(raw)
        raise NotFoundError("User not found.")


def update_user_profile(user_id: str, first_name: str, last_name: str, phone: str) -> User:
    if not all(isinstance(v, str) for v in (first_name, last_name or "", phone)):
        raise ValidationError("Name and phone must be text.")
    if not (first_name or "").strip():
        raise ValidationError("First name is required.")
    if not (phone or "").strip():
        raise ValidationError("Phone number is required.")
    return _update_user(
        lambda u: u.get("id") == user_id,
        firstName=first_name.strip(),
        lastName=(last_name or "").strip(),
        phone=phone.strip(),
    )


def update_user_password(email: str, new_password: str) -> User:
    email = _normalize_email(email)
    return _update_user(lambda u: u.get("email") == email, password=hash_password(new_password))


def set_user_role(email: str, role: str) -> User:
    if role not in Role.ALL:
        raise ValidationError(f"Unknown role '{role}'")
    email = _normalize_email(email)
    return _update_user(lambda u: u.get("email") == email, role=role)
