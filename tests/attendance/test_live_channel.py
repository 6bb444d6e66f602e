from __future__ import annotations

import threading
from datetime import datetime, timezone

from daily_attendance.attendance.live import LiveAttendanceView, RunningHoursTicker
from daily_attendance.core.enums import DayState


def test_subscriber_gets_current_state_immediately(service):
    seen = []
    sub = service.subscribe_today("e1", seen.append)

    assert seen == [None]
    sub.cancel()


def test_subscriber_gets_every_write(service, clock):
    seen = []
    sub = service.subscribe_today("e1", seen.append)

    service.check_in("e1")
    clock.set(datetime(2026, 2, 2, 17, 30, tzinfo=timezone.utc))
    service.check_out("e1")

    assert [r.state if r else None for r in seen] == [None, DayState.CHECKED_IN, DayState.CHECKED_OUT]
    assert seen[-1].total_hours == 8.5
    sub.cancel()


def test_existing_record_is_delivered_on_subscribe(service):
    service.check_in("e1")
    seen = []

    with service.subscribe_today("e1", seen.append):
        pass

    assert len(seen) == 1
    assert seen[0].state == DayState.CHECKED_IN


def test_subscribers_are_independent(service):
    first, second = [], []
    sub_a = service.subscribe_today("e1", first.append)
    sub_b = service.subscribe_today("e1", second.append)

    sub_a.cancel()
    service.check_in("e1")

    assert first == [None]
    assert len(second) == 2
    sub_b.cancel()


def test_cancel_is_idempotent_and_final(service, clock):
    seen = []
    sub = service.subscribe_today("e1", seen.append)

    sub.cancel()
    sub.cancel()
    service.check_in("e1")

    assert seen == [None]
    assert not sub.active


def test_failing_subscriber_does_not_break_the_write(service):
    def boom(_record):
        raise RuntimeError("listener bug")

    sub = service.subscribe_today("e1", boom)
    service.check_in("e1")

    assert service.get_today("e1") is not None
    sub.cancel()


def test_failed_transaction_does_not_notify(service):
    service.check_in("e1")
    seen = []
    sub = service.subscribe_today("e1", seen.append)

    try:
        service.check_in("e1")
    except Exception:
        pass

    assert len(seen) == 1
    sub.cancel()


def test_ticker_runs_until_stopped():
    ticked = threading.Event()
    ticker = RunningHoursTicker(0.01, ticked.set)

    ticker.start()
    assert ticked.wait(timeout=2)
    ticker.stop()
    ticker.stop()

    assert not ticker.running


def test_live_view_ticks_only_while_checked_in(service, clock):
    updates = []
    tick_seen = threading.Event()

    def on_update(snap):
        updates.append(snap)
        if snap.hours == 1.5:
            tick_seen.set()

    view = LiveAttendanceView(service, "e1", on_update, interval=0.01, clock=clock).open()
    assert updates[0].state == DayState.EMPTY
    assert updates[0].hours is None
    assert not view.ticking

    service.check_in("e1")
    assert view.ticking
    clock.set(datetime(2026, 2, 2, 10, 30, tzinfo=timezone.utc))
    assert tick_seen.wait(timeout=2)
    assert updates[-1].checked_in
    assert updates[-1].hours == 1.5
    assert updates[-1].hours_text == "1.50"

    service.check_out("e1")
    assert not view.ticking
    assert view.snapshot().state == DayState.CHECKED_OUT

    view.close()
    count = len(updates)
    view.close()
    assert not view.ticking
    assert len(updates) == count


def test_closing_live_view_stops_timer_and_subscription(service, store):
    service.check_in("e1")
    view = LiveAttendanceView(service, "e1", lambda snap: None, interval=0.01).open()
    assert view.ticking

    view.close()

    assert not view.ticking
    assert store.subscriber_count(service.today_key("e1")) == 0
