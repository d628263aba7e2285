from flask import current_app

from models.user import Role
from scheduling.slots import generate_time_slots
from security.password import hash_password

DEFAULT_ADMIN_ID = "admin-user"


def default_courts(count: int) -> list:
    return [{"id": i, "name": f"Court {i}"} for i in range(1, count + 1)]


def default_admin() -> dict:
    cfg = current_app.config
    return {
        "id": DEFAULT_ADMIN_ID,
        "firstName": "Admin",
        "lastName": "User",
        "email": cfg["DEFAULT_ADMIN_EMAIL"].strip().lower(),
        "phone": cfg.get("DEFAULT_ADMIN_PHONE", ""),
        "password": hash_password(cfg["DEFAULT_ADMIN_PASSWORD"]),
        "role": Role.ADMIN,
    }


def seed_document(existing: dict) -> dict:
    """
    Fill in whatever top-level keys are missing from ``existing``.
    Bookings and users already present are kept.
    """
    cfg = current_app.config
    doc = dict(existing)

    courts = doc.get("courts") or default_courts(int(cfg["DEFAULT_COURT_COUNT"]))
    doc["courts"] = courts
    if not doc.get("timeSlots"):
        doc["timeSlots"] = generate_time_slots(
            cfg["DEFAULT_OPENING_TIME"],
            cfg["DEFAULT_CLOSING_TIME"],
            cfg["DEFAULT_SLOT_MINUTES"],
        )
    if not isinstance(doc.get("courtRates"), dict):
        doc["courtRates"] = {str(c["id"]): cfg["DEFAULT_HOURLY_RATE"] for c in courts}
    if not isinstance(doc.get("bookings"), list):
        doc["bookings"] = []
    if not isinstance(doc.get("users"), list):
        doc["users"] = []

    admin_email = cfg["DEFAULT_ADMIN_EMAIL"].strip().lower()
    if not any(u.get("email") == admin_email for u in doc["users"]):
        doc["users"].append(default_admin())

    return doc
