from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from daily_attendance.attendance.memory_attendance_store import InMemoryAttendanceStore
from daily_attendance.attendance.service import AttendanceService


class FakeClock:
    """Server clock the tests move by hand."""

    def __init__(self, start: datetime):
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def set(self, value: datetime) -> None:
        with self._lock:
            self._now = value

    def advance(self, **kwargs) -> datetime:
        with self._lock:
            self._now = self._now + timedelta(**kwargs)
            return self._now


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def store(clock) -> InMemoryAttendanceStore:
    return InMemoryAttendanceStore(clock=clock)


@pytest.fixture
def service(store) -> AttendanceService:
    return AttendanceService(store, default_timezone="UTC", backoff_seconds=0.0)
