import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

QR_SECRET_KEY = "test-qr-secret"
QR_WINDOW_MINUTES = 5
QR_GRACE_WINDOWS = 0

BEARER_TTL_MINUTES = ""
OTP_TTL_SECONDS = 300

ADMIN_USER = "admin"
ADMIN_PASSWORD = "admin123"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
