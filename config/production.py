import os

SECRET_KEY = os.getenv("SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

# No defaults: create_app refuses to start without a QR secret
QR_SECRET_KEY = os.getenv("QR_SECRET_KEY")
QR_WINDOW_MINUTES = int(os.getenv("QR_WINDOW_MINUTES", "5"))
QR_GRACE_WINDOWS = int(os.getenv("QR_GRACE_WINDOWS", "0"))

BEARER_TTL_MINUTES = os.getenv("BEARER_TTL_MINUTES", "")
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))

ADMIN_USER = os.getenv("ADMIN_USER", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
