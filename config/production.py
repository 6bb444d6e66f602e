import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")

# QR Code token for attendance punches
QR_TOKEN = os.getenv("QR_TOKEN", "OFFICE_CHECKIN_SYSTEM")

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
TX_MAX_ATTEMPTS = int(os.getenv("TX_MAX_ATTEMPTS", "5"))
TX_BACKOFF_SECONDS = float(os.getenv("TX_BACKOFF_SECONDS", "0.05"))
RUNNING_HOURS_INTERVAL_SECONDS = float(os.getenv("RUNNING_HOURS_INTERVAL_SECONDS", "30"))
STREAM_KEEPALIVE_SECONDS = float(os.getenv("STREAM_KEEPALIVE_SECONDS", "15"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD")
