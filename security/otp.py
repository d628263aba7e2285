"""One-time codes for signup verification and password reset.

Only SHA-256 hashes of the lookup token and the code are persisted, in the
store's ``otpChallenges`` list.
"""

import hashlib
import hmac
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from flask import current_app

from models.db import db
from utils.errors import ValidationError

PURPOSE_SIGNUP = "SIGNUP"
PURPOSE_RESET = "PASSWORD_RESET"

INVALID_CODE = "Invalid or expired code"


def _hash(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _expired(row: dict, now: datetime) -> bool:
    expires = datetime.fromisoformat(row["expiresAt"])
    if expires.tzinfo is None:
        # rows written before timestamps carried an offset are UTC
        expires = expires.replace(tzinfo=timezone.utc)
    return expires <= now


def generate_code(length: int = None) -> str:
    length = length or int(current_app.config.get("OTP_LENGTH", 6))
    return "".join(secrets.choice(string.digits) for _ in range(length))


def create_challenge(purpose: str, email: str, payload: Optional[dict] = None) -> Tuple[str, str]:
    """
    Store a new challenge and return (token, code). Any earlier challenge
    for the same email and purpose is replaced.
    """
    token = secrets.token_urlsafe(24)
    code = generate_code()
    now = datetime.now(timezone.utc)
    ttl = int(current_app.config.get("OTP_TTL_SECONDS", 300))

    row = {
        "tokenHash": _hash(token),
        "codeHash": _hash(code),
        "purpose": purpose,
        "email": email,
        "payload": payload or {},
        "expiresAt": (now + timedelta(seconds=ttl)).isoformat(),
        "attempts": 0,
    }

    with db.transaction() as doc:
        kept = [
            r for r in doc.get("otpChallenges", [])
            if not _expired(r, now) and not (r["purpose"] == purpose and r["email"] == email)
        ]
        kept.append(row)
        doc["otpChallenges"] = kept

    return token, code


def consume_challenge(token: str, code: str, purpose: str) -> dict:
    """
    Verify ``code`` against the challenge behind ``token``. On success the
    challenge is removed and returned; wrong codes count towards
    OTP_MAX_ATTEMPTS, after which the challenge is discarded.
    """
    if not isinstance(token, str) or not isinstance(code, str) or not token or not code:
        raise ValidationError(INVALID_CODE)

    max_attempts = int(current_app.config.get("OTP_MAX_ATTEMPTS", 5))
    now = datetime.now(timezone.utc)
    token_hash = _hash(token)
    matched = None

    with db.transaction() as doc:
        rows = doc.setdefault("otpChallenges", [])
        row = next((r for r in rows if r["tokenHash"] == token_hash and r["purpose"] == purpose), None)
        if row is None:
            pass
        elif _expired(row, now):
            rows.remove(row)
        elif not hmac.compare_digest(row["codeHash"], _hash(code.strip())):
            row["attempts"] += 1
            if row["attempts"] >= max_attempts:
                rows.remove(row)
        else:
            rows.remove(row)
            matched = row

    # raised outside the transaction so the attempt counter is persisted
    if matched is None:
        raise ValidationError(INVALID_CODE)
    return matched
