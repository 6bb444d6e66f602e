from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "authentication_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "authorization_error"


class AttendanceError(DomainError):
    """Base for check-in/check-out rule violations."""

    code = "attendance_error"
    default_message = "Attendance operation rejected"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class AlreadyRecordedError(AttendanceError):
    """Check-in attempted on a day that already started or finished."""

    code = "already_recorded"
    default_message = "Attendance already recorded for today"


class NoCheckInError(AttendanceError):
    """Check-out attempted without a check-in for the day."""

    code = "no_check_in"
    default_message = "No check-in found for today"


class AlreadyCheckedOutError(AttendanceError):
    """Check-out attempted twice."""

    code = "already_checked_out"
    default_message = "Already checked out"


class StoreError(Exception):
    """Base for attendance store failures (not business rules)."""

    code = "store_error"


class TransientStoreConflict(StoreError):
    """A concurrent write moved the document between read and commit. Safe to retry."""

    code = "store_conflict"


class StoreUnreachableError(StoreError):
    """The store is unavailable or kept conflicting; nothing was committed."""

    code = "store_unreachable"
