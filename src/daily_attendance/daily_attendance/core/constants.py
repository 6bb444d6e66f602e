"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "UTC"
DEFAULT_TX_MAX_ATTEMPTS = 5
DEFAULT_TX_BACKOFF_SECONDS = 0.02
DEFAULT_RUNNING_HOURS_INTERVAL_SECONDS = 30.0
DEFAULT_SESSION_DAYS = 7

HOURS_DECIMAL_PLACES = 2
EMPLOYEE_ID_PREFIX = "EMP-"
EMPLOYEE_ID_LENGTH = 8
