import secrets

from flask import Blueprint, jsonify, g

from models.data_service import (
    add_user,
    get_user_by_email,
    update_user_password,
    update_user_profile,
)
from models.user import Role
from routes.serializers import json_body, text_arg, user_json
from security.csrf import issue_csrf_token, clear_csrf_token
from security.otp import PURPOSE_RESET, PURPOSE_SIGNUP, consume_challenge, create_challenge
from security.password import hash_password, verify_password
from security.password_policy import validate_password
from security.session import login, logout as end_session, set_session_cookie
from utils.audit import log_event
from utils.auth_context import authenticate, login_required
from utils.errors import AuthError
from utils.notifications import deliver_code, password_reset_email, signup_otp_email


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def _start_session(user, message: str, status: int):
    sess = login(g.session, user)
    resp = jsonify(message=message, user=user_json(user))
    set_session_cookie(resp, sess)
    issue_csrf_token(resp)
    return resp, status


def _policy_failure(password: str, confirm: str):
    if password != confirm:
        return jsonify(error="Passwords do not match"), 400
    valid, errors = validate_password(password)
    if not valid:
        return jsonify(error="Password does not meet policy", details=errors), 400
    return None


@auth_bp.post("/signup")
def signup():
    data = json_body()
    first_name = text_arg(data, "first_name").strip()
    last_name = text_arg(data, "last_name").strip()
    email = text_arg(data, "email").strip().lower()
    phone = text_arg(data, "phone").strip()
    password = text_arg(data, "password")

    if not first_name or not last_name:
        return jsonify(error="First and last name are required"), 400
    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400
    if not phone:
        return jsonify(error="Phone number is required"), 400

    failure = _policy_failure(password, text_arg(data, "confirm_password"))
    if failure:
        return failure

    if get_user_by_email(email):
        log_event("REGISTER_FAIL_EMAIL_EXISTS", metadata={"email": email})
        return jsonify(error="Email already registered"), 409

    token, code = create_challenge(PURPOSE_SIGNUP, email, {
        "firstName": first_name,
        "lastName": last_name,
        "phone": phone,
        "passwordHash": hash_password(password),
    })
    delivery = deliver_code(email, code, signup_otp_email(first_name, code))

    log_event("SIGNUP_OTP_ISSUED", metadata={"email": email, "sent": delivery["sent"]})
    return jsonify(message="Verification code sent", otp_token=token, **delivery), 200


@auth_bp.post("/signup/verify")
def signup_verify():
    data = json_body()
    challenge = consume_challenge(text_arg(data, "otp_token"), text_arg(data, "code"), PURPOSE_SIGNUP)

    profile = challenge["payload"]
    user = add_user(
        profile["firstName"],
        profile["lastName"],
        challenge["email"],
        profile["phone"],
        profile["passwordHash"],
        role=Role.USER,
    )
    log_event("REGISTER_SUCCESS", user_id=user.id)
    return _start_session(user, "Registered successfully", 201)


@auth_bp.post("/login")
def login_view():
    data = json_body()
    email = text_arg(data, "email").strip().lower()
    password = text_arg(data, "password")

    try:
        user = authenticate(email, password)
    except AuthError:
        log_event("LOGIN_FAIL", metadata={"email": email})
        raise

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return _start_session(user, "Login OK", 200)


@auth_bp.post("/logout")
@login_required
def logout():
    user_id = g.user.id
    g.session = end_session(g.session)
    g.user = None

    resp = jsonify(message="Logged out")
    set_session_cookie(resp, g.session)
    clear_csrf_token(resp)

    log_event("LOGOUT", user_id=user_id)
    return resp, 200


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(user_json(g.user)), 200


@auth_bp.get("/profile")
@login_required
def get_profile():
    return jsonify(
        first_name=g.user.first_name,
        last_name=g.user.last_name,
        phone=g.user.phone,
        email=g.user.email,
    ), 200


@auth_bp.post("/profile")
@login_required
def update_profile():
    data = json_body()
    user = update_user_profile(
        g.user.id,
        text_arg(data, "first_name", g.user.first_name),
        text_arg(data, "last_name", g.user.last_name),
        text_arg(data, "phone", g.user.phone),
    )
    log_event("PROFILE_UPDATED", user_id=user.id)
    return jsonify(message="Profile updated", user=user_json(user)), 200


@auth_bp.post("/change_password")
@login_required
def change_password():
    data = json_body()
    current_password = text_arg(data, "current_password")
    new_password = text_arg(data, "new_password")

    if not verify_password(current_password, g.user.password):
        return jsonify(error="Invalid current password"), 401

    failure = _policy_failure(new_password, text_arg(data, "confirm_password", new_password))
    if failure:
        return failure

    update_user_password(g.user.email, new_password)
    log_event("PASSWORD_CHANGED", user_id=g.user.id)
    return jsonify(message="Password updated"), 200


@auth_bp.post("/forgot_password")
def forgot_password():
    data = json_body()
    email = text_arg(data, "email").strip().lower()
    if not _is_valid_email(email):
        return jsonify(error="Invalid email"), 400

    user = get_user_by_email(email)
    if user is None:
        # same response shape as a real request; the token matches nothing
        log_event("PASSWORD_RESET_UNKNOWN_EMAIL", metadata={"email": email})
        return jsonify(message="If the account exists, a reset code was sent",
                       otp_token=secrets.token_urlsafe(24)), 200

    token, code = create_challenge(PURPOSE_RESET, email)
    delivery = deliver_code(email, code, password_reset_email(user.first_name, code))

    log_event("PASSWORD_RESET_OTP_ISSUED", user_id=user.id)
    body = {"message": "If the account exists, a reset code was sent", "otp_token": token}
    if "debug_code" in delivery:
        body["debug_code"] = delivery["debug_code"]
    return jsonify(body), 200


@auth_bp.post("/reset_password")
def reset_password():
    data = json_body()
    new_password = text_arg(data, "new_password")

    failure = _policy_failure(new_password, text_arg(data, "confirm_password", new_password))
    if failure:
        return failure

    challenge = consume_challenge(text_arg(data, "otp_token"), text_arg(data, "code"), PURPOSE_RESET)
    user = update_user_password(challenge["email"], new_password)

    log_event("PASSWORD_RESET", user_id=user.id)
    return jsonify(message="Password has been reset"), 200
