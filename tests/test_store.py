import json

import pytest

from models import db
from models.data_service import get_data
from security.password import verify_password
from utils.errors import StoreError


def test_missing_store_is_seeded_with_defaults(app_ctx):
    snapshot = get_data()

    assert [c.name for c in snapshot.courts] == ["Court 1", "Court 2", "Court 3", "Court 4"]
    assert snapshot.time_slots[0] == "09:00 - 10:00"
    assert snapshot.time_slots[-1] == "20:00 - 21:00"
    assert snapshot.court_rates == {1: 20, 2: 20, 3: 20, 4: 20}
    assert snapshot.bookings == []

    [admin] = snapshot.users
    assert admin.role == "admin"
    assert admin.email == "admin@example.com"
    assert admin.password != "admin-pass-123"
    assert verify_password("admin-pass-123", admin.password)


def test_seed_is_written_with_persisted_layout(app_ctx):
    get_data()
    with open(db.path, encoding="utf-8") as fh:
        doc = json.load(fh)
    assert {"bookings", "courts", "timeSlots", "courtRates", "users"} <= set(doc)
    assert doc["courtRates"] == {"1": 20, "2": 20, "3": 20, "4": 20}


def test_incomplete_store_keeps_existing_bookings(app_ctx, tmp_path):
    booking = {
        "id": "legacy",
        "courtId": 1,
        "date": "2024-06-01",
        "timeSlot": "09:00 - 10:00",
        "customerName": "Kim",
        "customerPhone": "123",
        "status": "booked",
    }
    import os
    os.makedirs(os.path.dirname(db.path), exist_ok=True)
    with open(db.path, "w", encoding="utf-8") as fh:
        json.dump({"bookings": [booking]}, fh)

    snapshot = get_data()

    assert [b.id for b in snapshot.bookings] == ["legacy"]
    assert len(snapshot.courts) == 4
    assert any(u.role == "admin" for u in snapshot.users)


def test_corrupt_store_is_not_overwritten(app_ctx):
    import os
    os.makedirs(os.path.dirname(db.path), exist_ok=True)
    with open(db.path, "w", encoding="utf-8") as fh:
        fh.write("{not json")

    with pytest.raises(StoreError):
        db.read()

    with open(db.path, encoding="utf-8") as fh:
        assert fh.read() == "{not json"


def test_transaction_discards_changes_on_error(app_ctx):
    db.read()

    with pytest.raises(RuntimeError):
        with db.transaction() as doc:
            doc["courts"] = []
            raise RuntimeError("boom")

    assert len(db.read()["courts"]) == 4


def test_transaction_persists_changes(app_ctx):
    with db.transaction() as doc:
        doc["courts"].append({"id": 5, "name": "Court 5"})

    assert db.read()["courts"][-1] == {"id": 5, "name": "Court 5"}
