"""Client-held sessions.

A ``Session`` is an immutable value; ``login`` and ``logout`` return a new
one instead of mutating shared state. The value travels in a signed cookie
and carries no expiry: it lives until the client drops it or logs out.
"""

from dataclasses import dataclass
from typing import Optional

from flask import current_app, request
from itsdangerous import BadSignature, URLSafeSerializer

_SALT = "courtslot-session"


@dataclass(frozen=True)
class Session:
    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Session()


def login(session: Session, user) -> Session:
    return Session(user_id=user.id, role=user.role)


def logout(session: Session) -> Session:
    return ANONYMOUS


def _serializer() -> URLSafeSerializer:
    return URLSafeSerializer(current_app.config["SECRET_KEY"], salt=_SALT)


def dump_session(session: Session) -> str:
    return _serializer().dumps({"uid": session.user_id, "role": session.role})


def load_session(token: Optional[str]) -> Session:
    if not token:
        return ANONYMOUS
    try:
        data = _serializer().loads(token)
    except BadSignature:
        return ANONYMOUS
    if not isinstance(data, dict) or not data.get("uid"):
        return ANONYMOUS
    return Session(user_id=str(data["uid"]), role=data.get("role"))


def _cookie_name() -> str:
    return current_app.config.get("AUTH_COOKIE_NAME", "courtslot_session")


def get_session_from_request() -> Session:
    return load_session(request.cookies.get(_cookie_name()))


def set_session_cookie(resp, session: Session):
    if not session.is_authenticated:
        resp.delete_cookie(_cookie_name(), path="/")
        return resp
    resp.set_cookie(
        _cookie_name(),
        dump_session(session),
        httponly=True,
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
        samesite=current_app.config.get("SESSION_COOKIE_SAMESITE", "Lax"),
        path="/",
    )
    return resp
