from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from daily_attendance.attendance.model import GeoPoint
from daily_attendance.core.enums import AttendanceStatus, DayState, PunchMethod
from daily_attendance.core.exceptions import (
    AlreadyCheckedOutError,
    AlreadyRecordedError,
    NoCheckInError,
    ValidationError,
)


def _at(hour: int, minute: int = 0, second: int = 0, *, day: int = 2) -> datetime:
    return datetime(2026, 2, day, hour, minute, second, tzinfo=timezone.utc)


def _seed(store, key: str, document: dict) -> None:
    tx = store.begin(key)
    tx.set(document)
    store.commit(tx)


def test_first_check_in_creates_present_record(service, fixed_now):
    service.check_in("e1")

    rec = service.get_today("e1")
    assert rec is not None
    assert rec.employee_id == "e1"
    assert rec.work_date == date(2026, 2, 2)
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.check_in.timestamp == fixed_now
    assert rec.check_in.method == PunchMethod.MANUAL
    assert rec.check_in.location is None
    assert rec.check_out is None
    assert rec.total_hours is None
    assert rec.created_at == fixed_now
    assert rec.updated_at == fixed_now


def test_second_check_in_same_day_is_rejected(service):
    service.check_in("e1")

    with pytest.raises(AlreadyRecordedError) as exc:
        service.check_in("e1")

    assert str(exc.value) == "Attendance already recorded for today"


def test_check_out_records_punch_and_total_hours(service, clock):
    service.check_in("e1")
    clock.set(_at(17, 30))

    service.check_out("e1")

    rec = service.get_today("e1")
    assert rec.check_out.timestamp == _at(17, 30)
    assert rec.check_out.method == PunchMethod.MANUAL
    assert rec.total_hours == 8.50
    assert rec.state == DayState.CHECKED_OUT
    assert rec.check_in.timestamp == _at(9, 0)
    assert rec.status == AttendanceStatus.PRESENT


def test_check_out_without_record_fails(service):
    with pytest.raises(NoCheckInError) as exc:
        service.check_out("e2")

    assert str(exc.value) == "No check-in found for today"
    assert service.get_today("e2") is None


def test_second_check_out_fails(service, clock):
    service.check_in("e1")
    clock.set(_at(17, 30))
    service.check_out("e1")

    clock.set(_at(18, 0))
    with pytest.raises(AlreadyCheckedOutError) as exc:
        service.check_out("e1")

    assert str(exc.value) == "Already checked out"
    assert service.get_today("e1").total_hours == 8.50


def test_check_in_after_check_out_fails(service, clock):
    service.check_in("e1")
    clock.set(_at(12, 0))
    service.check_out("e1")

    with pytest.raises(AlreadyRecordedError):
        service.check_in("e1")


def test_check_in_with_location_uses_gps(service):
    service.check_in("e3", location=GeoPoint(latitude=1.0, longitude=2.0))

    rec = service.get_today("e3")
    assert rec.check_in.method == PunchMethod.GPS
    assert rec.check_in.location == GeoPoint(latitude=1.0, longitude=2.0)


def test_explicit_method_wins_over_location_rule(service, clock):
    service.check_in("e3", location=GeoPoint(latitude=1.0, longitude=2.0), method=PunchMethod.QR)
    clock.set(_at(10, 0))
    service.check_out("e3", method=PunchMethod.SYSTEM)

    rec = service.get_today("e3")
    assert rec.check_in.method == PunchMethod.QR
    assert rec.check_out.method == PunchMethod.SYSTEM
    assert rec.check_out.location is None


def test_total_hours_matches_punch_timestamps(service, clock):
    service.check_in("e1")
    clock.set(_at(17, 47, 23))
    service.check_out("e1")

    rec = service.get_today("e1")
    elapsed = (rec.check_out.timestamp - rec.check_in.timestamp).total_seconds() / 3600
    assert rec.total_hours == round(max(0, elapsed), 2) == 8.79


def test_rejected_calls_leave_record_untouched(service, store, clock):
    service.check_in("e1")
    key = service.today_key("e1")
    before = store.get(key)

    clock.set(_at(11, 0))
    with pytest.raises(AlreadyRecordedError):
        service.check_in("e1")

    assert store.get(key) == before


def test_placeholder_record_is_taken_over_by_check_in(service, store, clock):
    key = service.today_key("e4")
    _seed(store, key, {"employeeId": "e4", "date": "2026-02-02", "status": "holiday", "note": "seeded"})

    clock.set(_at(10, 0))
    service.check_in("e4")

    doc = store.get(key)
    assert doc["status"] == "present"
    assert doc["note"] == "seeded"
    assert doc["checkIn"]["method"] == "manual"
    assert doc["createdAt"] == _at(9, 0).isoformat()
    assert doc["updatedAt"] == _at(10, 0).isoformat()


def test_check_out_without_readable_check_in_time_still_succeeds(service, store):
    key = service.today_key("e6")
    _seed(
        store,
        key,
        {"employeeId": "e6", "date": "2026-02-02", "status": "present", "checkIn": {"timestamp": None, "method": "manual"}},
    )

    service.check_out("e6")

    doc = store.get(key)
    assert "checkOut" in doc
    assert "totalHours" not in doc


def test_check_out_before_check_in_time_clamps_to_zero(service, store):
    key = service.today_key("e7")
    _seed(
        store,
        key,
        {
            "employeeId": "e7",
            "date": "2026-02-02",
            "status": "present",
            "checkIn": {"timestamp": _at(10, 0).isoformat(), "method": "manual"},
        },
    )

    service.check_out("e7")

    assert store.get(key)["totalHours"] == 0.0


def test_day_comes_from_callers_time_zone(service, clock):
    clock.set(_at(23, 30))

    service.check_in("e5", tz="Asia/Ho_Chi_Minh")

    assert service.today_key("e5", tz="Asia/Ho_Chi_Minh") == "e5_2026-02-03"
    rec = service.get_today("e5", tz="Asia/Ho_Chi_Minh")
    assert rec.work_date == date(2026, 2, 3)
    assert service.get_today("e5") is None


def test_check_out_after_midnight_does_not_reach_previous_day(service, clock):
    clock.set(_at(23, 0))
    service.check_in("e1")

    clock.set(_at(1, 0, day=3))
    with pytest.raises(NoCheckInError):
        service.check_out("e1")

    clock.set(_at(23, 0))
    rec = service.get_today("e1")
    assert rec.work_date == date(2026, 2, 2)
    assert rec.check_out is None


def test_unknown_time_zone_is_rejected(service):
    with pytest.raises(ValidationError):
        service.check_in("e1", tz="Mars/Olympus")


@pytest.mark.parametrize("tz", ["Europe/" + "x" * 300, "A" * 300])
def test_overlong_time_zone_is_rejected(service, tz):
    with pytest.raises(ValidationError):
        service.check_in("e1", tz=tz)
    with pytest.raises(ValidationError):
        service.get_today("e1", tz=tz)


def test_blank_employee_id_is_rejected(service):
    with pytest.raises(ValidationError):
        service.check_in("  ")


def test_today_state_follows_cycle(service, clock):
    assert service.today_state("e1") == DayState.EMPTY
    service.check_in("e1")
    assert service.today_state("e1") == DayState.CHECKED_IN
    clock.set(_at(12, 0))
    service.check_out("e1")
    assert service.today_state("e1") == DayState.CHECKED_OUT
