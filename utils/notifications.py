"""Templated emails: verification codes and cancellation decisions."""

import logging

from flask import current_app
from markupsafe import escape

from utils.audit import log_event
from utils.emailer import mail_configured, send_email
from utils.errors import TransportError

DECISION_APPROVED = "approved"
DECISION_REJECTED = "rejected"


def _brand() -> str:
    return current_app.config.get("MAIL_FROM_NAME", "CourtSlot")


def signup_otp_email(first_name: str, code: str):
    brand = _brand()
    subject = f"Your {brand} Verification Code"
    body = f"""Hello {first_name},

Your verification code for {brand} is: {code}

If you did not request this, please ignore this email.

Regards,
The {brand} Team"""
    html = f"""<p>Hello {escape(first_name)},</p>
<p>Your verification code for {escape(brand)} is: <strong>{escape(code)}</strong></p>
<p>If you did not request this, please ignore this email.</p>
<p>Regards,<br/>The {escape(brand)} Team</p>"""
    return subject, body, html


def password_reset_email(name: str, code: str):
    brand = _brand()
    subject = f"Your {brand} Password Reset Code"
    body = f"""Hello {name},

You requested to reset your password for {brand}.

Your One-Time Password (OTP) for password reset is: {code}

Please use this code to reset your password. If you did not request this, please ignore this email.

Regards,
The {brand} Team"""
    html = f"""<p>Hello {escape(name)},</p>
<p>You requested to reset your password for {escape(brand)}.</p>
<p>Your One-Time Password (OTP) for password reset is: <strong>{escape(code)}</strong></p>
<p>Please use this code to reset your password. If you did not request this, please ignore this email.</p>
<p>Regards,<br/>The {escape(brand)} Team</p>"""
    return subject, body, html


def cancellation_status_email(first_name: str, booking, court_label: str, decision: str):
    brand = _brand()
    if decision == DECISION_APPROVED:
        subject = "Your Cancellation Request has been Approved"
        outcome = "The booking has been cancelled and the slot is now available for others."
    else:
        subject = "Update on your Cancellation Request"
        outcome = "Your booking remains active. Please contact us if you have any questions."

    body = f"""Hello {first_name},

This is an update regarding your booking cancellation request.

Booking Details:
- Court: {court_label}
- Date: {booking.date}
- Time: {booking.time_slot}

Your cancellation request has been {decision}.

{outcome}

Regards,
The {brand} Team"""
    html = f"""<p>Hello {escape(first_name)},</p>
<p>This is an update regarding your booking cancellation request.</p>
<p><b>Booking Details:</b></p>
<ul>
    <li><b>Court:</b> {escape(court_label)}</li>
    <li><b>Date:</b> {escape(booking.date)}</li>
    <li><b>Time:</b> {escape(booking.time_slot)}</li>
</ul>
<p>Your cancellation request has been <strong>{escape(decision)}</strong>.</p>
<p>{escape(outcome)}</p>
<p>Regards,<br/>The {escape(brand)} Team</p>"""
    return subject, body, html


def deliver_code(to_email: str, code: str, email) -> dict:
    """
    Send a verification code email. Returns the fields to merge into the API
    response; outside production, with mail unset and OTP_DEBUG_ECHO on, the
    code is echoed back instead of sent.
    """
    subject, body, html = email
    if not mail_configured() and current_app.config.get("OTP_DEBUG_ECHO"):
        current_app.logger.warning("Mail not configured; echoing verification code for %s", to_email)
        return {"sent": False, "debug_code": code}

    message_id = send_email(to_email, subject, body, html)
    return {"sent": True, "message_id": message_id}


def notify_cancellation_decision(user, booking, court_label: str, decision: str) -> dict:
    """
    Best-effort: the decision is already committed, so a transport failure is
    reported back rather than raised.
    """
    if user is None:
        return {"sent": False, "error": "No account linked to this booking"}

    subject, body, html = cancellation_status_email(user.first_name, booking, court_label, decision)
    try:
        message_id = send_email(user.email, subject, body, html)
    except TransportError as exc:
        log_event(
            "NOTIFY_CANCELLATION_FAIL",
            entity="booking",
            entity_id=booking.id,
            metadata={"error": exc.message},
            level=logging.WARNING,
        )
        return {"sent": False, "error": exc.message}

    return {"sent": True, "message_id": message_id, "error": None}
