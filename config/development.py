import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

# HMAC key for QR tokens; changing it invalidates every code on display
QR_SECRET_KEY = os.getenv("QR_SECRET_KEY", "dev-qr-secret")
QR_WINDOW_MINUTES = int(os.getenv("QR_WINDOW_MINUTES", "5"))
# Preceding windows still accepted at scan time (0 = strict)
QR_GRACE_WINDOWS = int(os.getenv("QR_GRACE_WINDOWS", "0"))

# Empty = bearer credentials live until logout/restart
BEARER_TTL_MINUTES = os.getenv("BEARER_TTL_MINUTES", "")
OTP_TTL_SECONDS = int(os.getenv("OTP_TTL_SECONDS", "300"))

ADMIN_USER = os.getenv("ADMIN_USER", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")

DEBUG = True

# If enabled, app applies pending migrations and ensures the admin account on startup
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
