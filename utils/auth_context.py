from functools import wraps
from flask import g, jsonify

from models.data_service import get_user_by_email, get_user_by_id
from security.password import hash_password, verify_password
from security.session import ANONYMOUS, get_session_from_request
from utils.errors import AuthError

INVALID_CREDENTIALS = "Invalid credentials"

_dummy_hash = None


def _unknown_user_hash() -> str:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = hash_password("unknown-user-placeholder")
    return _dummy_hash


def authenticate(email: str, password: str):
    """Return the matching user or raise the same AuthError for any mismatch."""
    user = get_user_by_email(email)
    if user is None:
        # keep timing close to a real check
        verify_password(password or "x", _unknown_user_hash())
        raise AuthError(INVALID_CREDENTIALS)
    if not verify_password(password, user.password):
        raise AuthError(INVALID_CREDENTIALS)
    return user


def load_current_user():
    sess = get_session_from_request()
    user = get_user_by_id(sess.user_id) if sess.is_authenticated else None
    if user is None:
        sess = ANONYMOUS
    g.session = sess
    g.user = user


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="Authentication required"), 401
        return fn(*args, **kwargs)
    return wrapper
