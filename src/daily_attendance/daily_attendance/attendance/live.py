from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_RUNNING_HOURS_INTERVAL_SECONDS
from ..core.enums import DayState
from ..database.subscriptions import Subscription
from .metrics import display_hours, format_hours
from .model import AttendanceRecord
from .service import AttendanceService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiveSnapshot:
    record: Optional[AttendanceRecord]
    state: DayState
    hours: Optional[float]

    @property
    def checked_in(self) -> bool:
        return self.state == DayState.CHECKED_IN

    @property
    def hours_text(self) -> str:
        return format_hours(self.hours)


class RunningHoursTicker:
    """Calls ``tick`` every ``interval`` seconds on a daemon thread until stopped."""

    def __init__(self, interval: float, tick: Callable[[], None], *, name: str = "running-hours"):
        self._interval = float(interval)
        self._tick = tick
        self._name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> None:
        if self.running:
            return
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, args=(self._stop,), name=self._name, daemon=True)
        self._thread.start()

    def _loop(self, stop: threading.Event) -> None:
        while not stop.wait(self._interval):
            self._tick()

    def stop(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self._interval + 1)


class LiveAttendanceView:
    """Today's record with derived hours, pushed to ``on_update``.

    Emits on every write to the record and, while checked in, every
    ``interval`` seconds so running hours stay current. ``close()`` cancels the
    subscription and the timer; it is safe to call more than once.
    """

    def __init__(
        self,
        service: AttendanceService,
        employee_id: str,
        on_update: Callable[[LiveSnapshot], None],
        *,
        tz: Optional[str] = None,
        interval: float = DEFAULT_RUNNING_HOURS_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._service = service
        self._employee_id = employee_id
        self._on_update = on_update
        self._tz = tz
        self._clock = clock
        self._lock = threading.RLock()
        self._record: Optional[AttendanceRecord] = None
        self._subscription: Optional[Subscription] = None
        self._closed = False
        self._ticker = RunningHoursTicker(interval, self._on_tick, name=f"running-hours-{employee_id}")

    @property
    def ticking(self) -> bool:
        return self._ticker.running

    def open(self) -> "LiveAttendanceView":
        self._subscription = self._service.subscribe_today(self._employee_id, self._on_change, tz=self._tz)
        return self

    def close(self) -> None:
        with self._lock:
            self._closed = True
        if self._subscription is not None:
            self._subscription.cancel()
        self._ticker.stop()

    def __enter__(self) -> "LiveAttendanceView":
        return self.open()

    def __exit__(self, *exc) -> None:
        self.close()

    def snapshot(self) -> LiveSnapshot:
        with self._lock:
            record = self._record
        state = record.state if record else DayState.EMPTY
        return LiveSnapshot(record=record, state=state, hours=display_hours(record, self._clock()))

    def _on_change(self, record: Optional[AttendanceRecord]) -> None:
        with self._lock:
            if self._closed:
                return
            self._record = record
            checked_in = record is not None and record.state == DayState.CHECKED_IN
        # the ticker thread takes self._lock, so never join it while holding it
        if checked_in:
            self._ticker.start()
        else:
            self._ticker.stop()
        self._emit()

    def _on_tick(self) -> None:
        with self._lock:
            if self._closed:
                return
        self._emit()

    def _emit(self) -> None:
        try:
            self._on_update(self.snapshot())
        except Exception:
            logger.exception("Live attendance listener failed for %s", self._employee_id)
