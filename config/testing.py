import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_test"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

QR_TOKEN = "TEST_QR_TOKEN"

DEFAULT_TIMEZONE = "UTC"
TX_MAX_ATTEMPTS = 5
TX_BACKOFF_SECONDS = 0.0
RUNNING_HOURS_INTERVAL_SECONDS = 30.0
STREAM_KEEPALIVE_SECONDS = 1.0

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SEED_ADMIN_EMAIL = None
SEED_ADMIN_PASSWORD = None
