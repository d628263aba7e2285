import smtplib
from email.message import EmailMessage
from email.utils import formataddr, make_msgid

from flask import current_app

from utils.errors import TransportError


def mail_configured() -> bool:
    cfg = current_app.config
    return bool(cfg.get("SMTP_HOST") and (cfg.get("SMTP_FROM_EMAIL") or cfg.get("SMTP_USERNAME")))


def send_email(to_email: str, subject: str, body: str, html: str = None) -> str:
    """Send one message and return its Message-ID."""
    host = current_app.config.get("SMTP_HOST")
    port = current_app.config.get("SMTP_PORT", 587)
    username = current_app.config.get("SMTP_USERNAME")
    password = current_app.config.get("SMTP_PASSWORD")
    from_email = current_app.config.get("SMTP_FROM_EMAIL") or username
    from_name = current_app.config.get("MAIL_FROM_NAME", "CourtSlot")
    use_tls = current_app.config.get("SMTP_USE_TLS", True)

    if not host or not from_email:
        raise TransportError("Email not configured")

    msg = EmailMessage()
    msg["From"] = formataddr((from_name, from_email))
    msg["To"] = to_email
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid(domain=from_email.split("@")[-1])
    msg.set_content(body)
    if html:
        msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(host, port, timeout=10) as server:
            if use_tls:
                server.starttls()
            if username and password:
                server.login(username, password)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        current_app.logger.error("Email to %s failed: %s", to_email, exc)
        raise TransportError("Could not send email. Please check your configuration.")

    return msg["Message-ID"]
