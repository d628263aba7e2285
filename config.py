import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _bool_env(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # JSON document holding bookings, courts, time slots, rates and users
    DATA_FILE = os.getenv("DATA_FILE", os.path.join(BASE_DIR, "data", "db.json"))
    STORE_LOCK_TIMEOUT = float(os.getenv("STORE_LOCK_TIMEOUT", "10"))

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "courtslot_session"

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _bool_env("SESSION_COOKIE_SECURE", "false")  # set True when using HTTPS

    # Password hashing / policy
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
    PASSWORD_MIN_LEN = int(os.getenv("PASSWORD_MIN_LEN", "8"))

    # Whether completed bookings keep their slots blocked for rebooking
    COMPLETED_BOOKINGS_BLOCK_SLOTS = _bool_env("COMPLETED_BOOKINGS_BLOCK_SLOTS", "false")

    # Defaults seeded on first run
    DEFAULT_OPENING_TIME = os.getenv("DEFAULT_OPENING_TIME", "09:00")
    DEFAULT_CLOSING_TIME = os.getenv("DEFAULT_CLOSING_TIME", "21:00")
    DEFAULT_SLOT_MINUTES = int(os.getenv("DEFAULT_SLOT_MINUTES", "60"))
    DEFAULT_COURT_COUNT = int(os.getenv("DEFAULT_COURT_COUNT", "4"))
    DEFAULT_HOURLY_RATE = int(os.getenv("DEFAULT_HOURLY_RATE", "20"))

    # Bootstrap admin (change before production use)
    DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "admin@example.com")
    DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "change-me-now1")
    DEFAULT_ADMIN_PHONE = os.getenv("DEFAULT_ADMIN_PHONE", "")

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = _bool_env("SMTP_USE_TLS", "true")
    MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "CourtSlot")

    # Email OTP (signup + password reset)
    OTP_LENGTH = int(os.getenv("OTP_LENGTH", "6"))
    OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))  # 5 minutes
    OTP_MAX_ATTEMPTS = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
    # Return the code in the API response when mail is not configured (dev only)
    OTP_DEBUG_ECHO = _bool_env("OTP_DEBUG_ECHO", "false")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
