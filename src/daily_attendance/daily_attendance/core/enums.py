from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Day status stored on the attendance document."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    HOLIDAY = "holiday"
    LEAVE = "leave"


class PunchMethod(str, Enum):
    """How a check-in or check-out was captured."""

    MANUAL = "manual"
    GPS = "gps"
    QR = "qr"
    SYSTEM = "system"


class DayState(str, Enum):
    """Position of today's record in the check-in/check-out cycle."""

    EMPTY = "EMPTY"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
