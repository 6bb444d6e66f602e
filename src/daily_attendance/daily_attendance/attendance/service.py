from __future__ import annotations

import logging
import time
from datetime import date
from typing import Callable, Optional, TypeVar

from ..common.datetime_utils import local_day, resolve_timezone
from ..common.retry import retry_on_conflict
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_TIMEZONE, DEFAULT_TX_BACKOFF_SECONDS, DEFAULT_TX_MAX_ATTEMPTS
from ..core.enums import AttendanceStatus, DayState, PunchMethod
from ..core.exceptions import (
    AlreadyCheckedOutError,
    AlreadyRecordedError,
    AttendanceError,
    NoCheckInError,
)
from ..database.subscriptions import Subscription
from .metrics import elapsed_hours
from .model import AttendanceRecord, GeoPoint, Punch, attendance_key
from .repository import AttendanceStore, StoreTransaction

logger = logging.getLogger(__name__)

T = TypeVar("T")

RecordCallback = Callable[[Optional[AttendanceRecord]], None]


def _punch_method(location: Optional[GeoPoint], method: Optional[PunchMethod]) -> PunchMethod:
    if method is not None:
        return method
    return PunchMethod.GPS if location is not None else PunchMethod.MANUAL


class AttendanceService:
    """Use case: once-per-day check-in / check-out.

    Every mutation runs as a single-document transaction on the key
    ``{employee_id}_{YYYY-MM-DD}``. The calendar day is server time seen in the
    caller's time zone (``tz``, IANA name). A check-out is keyed by the day it
    is issued on; the stored ``date`` is written once, by the check-in.
    """

    def __init__(
        self,
        store: AttendanceStore,
        *,
        default_timezone: str = DEFAULT_TIMEZONE,
        max_attempts: int = DEFAULT_TX_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_TX_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._store = store
        self._default_timezone = default_timezone
        self._max_attempts = int(max_attempts)
        self._backoff_seconds = float(backoff_seconds)
        self._sleep = sleep

    # -- keys -------------------------------------------------------------

    def today(self, *, tz: Optional[str] = None) -> date:
        zone = resolve_timezone(tz, default=self._default_timezone)
        return local_day(self._store.server_time(), zone)

    def today_key(self, employee_id: str, *, tz: Optional[str] = None) -> str:
        employee_id = require_non_empty(employee_id, "employeeId")
        return attendance_key(employee_id, self.today(tz=tz))

    # -- transactions -----------------------------------------------------

    def _run(self, key: str, body: Callable[[StoreTransaction], T]) -> T:
        def attempt() -> T:
            tx = self._store.begin(key)
            result = body(tx)
            self._store.commit(tx)
            return result

        return retry_on_conflict(
            attempt,
            max_attempts=self._max_attempts,
            backoff_seconds=self._backoff_seconds,
            sleep=self._sleep,
        )

    def check_in(
        self,
        employee_id: str,
        *,
        location: Optional[GeoPoint] = None,
        tz: Optional[str] = None,
        method: Optional[PunchMethod] = None,
    ) -> None:
        employee_id = require_non_empty(employee_id, "employeeId")
        work_date = self.today(tz=tz)
        key = attendance_key(employee_id, work_date)
        punch_method = _punch_method(location, method)

        def body(tx: StoreTransaction) -> None:
            current = tx.snapshot
            if current is not None and (current.get("checkIn") or current.get("checkOut")):
                raise AlreadyRecordedError()

            punch = Punch(timestamp=tx.now, method=punch_method, location=location)
            if current is None:
                record = AttendanceRecord(
                    employee_id=employee_id,
                    work_date=work_date,
                    status=AttendanceStatus.PRESENT,
                    check_in=punch,
                )
                tx.set(record.to_document())
            else:
                # Placeholder seeded elsewhere (holiday/leave) with no punches.
                logger.info("Check-in overrides %s status on %s", current.get("status"), key)
                tx.merge({"status": AttendanceStatus.PRESENT.value, "checkIn": punch.to_document()})

        try:
            self._run(key, body)
        except AttendanceError as exc:
            logger.warning("Check-in rejected for %s: %s", key, exc)
            raise
        logger.info("Check-in recorded for %s (%s)", key, punch_method.value)

    def check_out(
        self,
        employee_id: str,
        *,
        location: Optional[GeoPoint] = None,
        tz: Optional[str] = None,
        method: Optional[PunchMethod] = None,
    ) -> None:
        employee_id = require_non_empty(employee_id, "employeeId")
        key = attendance_key(employee_id, self.today(tz=tz))
        punch_method = _punch_method(location, method)

        def body(tx: StoreTransaction) -> Optional[float]:
            current = tx.snapshot
            if current is None or not current.get("checkIn"):
                raise NoCheckInError()
            if current.get("checkOut"):
                raise AlreadyCheckedOutError()

            check_in = Punch.from_document(current["checkIn"])
            total_hours = elapsed_hours(check_in.timestamp, tx.now)

            fields = {"checkOut": Punch(timestamp=tx.now, method=punch_method, location=location).to_document()}
            if total_hours is not None:
                fields["totalHours"] = total_hours
            tx.merge(fields)
            return total_hours

        try:
            total_hours = self._run(key, body)
        except AttendanceError as exc:
            logger.warning("Check-out rejected for %s: %s", key, exc)
            raise
        if total_hours is None:
            logger.warning("Check-out recorded for %s without total hours", key)
        else:
            logger.info("Check-out recorded for %s (%.2fh)", key, total_hours)

    # -- reads ------------------------------------------------------------

    def get_today(self, employee_id: str, *, tz: Optional[str] = None) -> Optional[AttendanceRecord]:
        """Snapshot for display. Never use it to decide a mutation."""
        doc = self._store.get(self.today_key(employee_id, tz=tz))
        return AttendanceRecord.from_document(doc) if doc else None

    def today_state(self, employee_id: str, *, tz: Optional[str] = None) -> DayState:
        record = self.get_today(employee_id, tz=tz)
        return record.state if record else DayState.EMPTY

    def subscribe_today(
        self,
        employee_id: str,
        on_change: RecordCallback,
        *,
        tz: Optional[str] = None,
    ) -> Subscription:
        """Push today's record to ``on_change`` now and after every write, until cancelled."""

        key = self.today_key(employee_id, tz=tz)

        def deliver(doc: Optional[dict]) -> None:
            on_change(AttendanceRecord.from_document(doc) if doc else None)

        return self._store.subscribe(key, deliver)
