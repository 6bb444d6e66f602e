import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_db"),
}

# "memory" keeps everything in-process; "mysql" uses DB_CONFIG
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

# QR Code token for attendance punches
QR_TOKEN = os.getenv("QR_TOKEN", "OFFICE_CHECKIN_SYSTEM")

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")
TX_MAX_ATTEMPTS = int(os.getenv("TX_MAX_ATTEMPTS", "5"))
TX_BACKOFF_SECONDS = float(os.getenv("TX_BACKOFF_SECONDS", "0.02"))
RUNNING_HOURS_INTERVAL_SECONDS = float(os.getenv("RUNNING_HOURS_INTERVAL_SECONDS", "30"))
STREAM_KEEPALIVE_SECONDS = float(os.getenv("STREAM_KEEPALIVE_SECONDS", "15"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled (mysql backend only), schema.sql is applied on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Optional bootstrap admin, created on startup when missing
SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@example.com")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
