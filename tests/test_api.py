from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from daily_attendance.main import create_app


@pytest.fixture
def app(monkeypatch, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(
        {"SEED_ADMIN_EMAIL": "admin@example.com", "SEED_ADMIN_PASSWORD": "admin123"},
        clock=clock,
    )


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email, password):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def employee_client(client):
    assert _login(client, "admin@example.com", "admin123").status_code == 200
    resp = client.post(
        "/api/admin/employees",
        json={"name": "Ana", "email": "ana@example.com", "password": "secret1", "department": "Ops"},
    )
    assert resp.status_code == 201
    client.post("/api/auth/logout")
    assert _login(client, "ana@example.com", "secret1").status_code == 200
    return client


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_attendance_requires_login(client):
    resp = client.post("/api/attendance/check-in")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "authentication_error"


def test_bad_login_is_401(client):
    resp = _login(client, "admin@example.com", "nope")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_me_returns_session_context(employee_client):
    user = employee_client.get("/api/auth/me").get_json()["user"]
    assert user["role"] == "employee"
    assert user["employeeId"].startswith("EMP-")


def test_only_admin_can_provision(employee_client):
    resp = employee_client.post(
        "/api/admin/employees",
        json={"name": "Bo", "email": "bo@example.com", "password": "secret1", "department": "Ops"},
    )
    assert resp.status_code == 403


def test_day_cycle_over_http(employee_client, clock):
    assert employee_client.get("/api/attendance/today").get_json()["state"] == "EMPTY"

    resp = employee_client.post("/api/attendance/check-in", json={"latitude": 1.0, "longitude": 2.0})
    assert resp.status_code == 200

    again = employee_client.post("/api/attendance/check-in", json={})
    assert again.status_code == 409
    assert again.get_json() == {
        "success": False,
        "error": "already_recorded",
        "message": "Attendance already recorded for today",
    }

    clock.set(datetime(2026, 2, 2, 11, 0, tzinfo=timezone.utc))
    today = employee_client.get("/api/attendance/today").get_json()
    assert today["state"] == "CHECKED_IN"
    assert today["hours"] == 2.0
    assert today["record"]["checkIn"]["method"] == "gps"
    assert today["record"]["checkIn"]["location"] == {"latitude": 1.0, "longitude": 2.0}

    clock.set(datetime(2026, 2, 2, 17, 30, tzinfo=timezone.utc))
    assert employee_client.post("/api/attendance/check-out").status_code == 200

    done = employee_client.get("/api/attendance/today").get_json()
    assert done["state"] == "CHECKED_OUT"
    assert done["record"]["totalHours"] == 8.5
    assert done["hoursText"] == "8.50"

    twice = employee_client.post("/api/attendance/check-out")
    assert twice.status_code == 409
    assert twice.get_json()["error"] == "already_checked_out"


def test_check_out_without_check_in_over_http(employee_client):
    resp = employee_client.post("/api/attendance/check-out")
    assert resp.status_code == 409
    assert resp.get_json()["message"] == "No check-in found for today"


def test_half_location_is_rejected(employee_client):
    resp = employee_client.post("/api/attendance/check-in", json={"latitude": 1.0})
    assert resp.status_code == 400


def test_qr_punch_checks_token(employee_client):
    bad = employee_client.post("/api/attendance/qr", json={"qr_code": "WRONG"})
    assert bad.status_code == 400

    ok = employee_client.post("/api/attendance/qr", json={"qr_code": "TEST_QR_TOKEN"})
    assert ok.status_code == 200
    record = employee_client.get("/api/attendance/today").get_json()["record"]
    assert record["checkIn"]["method"] == "qr"


def test_qr_image_is_png(employee_client):
    resp = employee_client.get("/api/attendance/qr/image")
    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_today_stream_sends_current_state_first(employee_client, app):
    employee_client.post("/api/attendance/check-in")

    resp = employee_client.get("/api/attendance/today/stream", buffered=False)
    assert resp.status_code == 200
    assert resp.mimetype == "text/event-stream"

    first = next(iter(resp.response)).decode("utf-8")
    resp.close()

    assert first.startswith("data: ")
    payload = json.loads(first[len("data: "):].strip())
    assert payload["state"] == "CHECKED_IN"
    assert payload["checkedIn"] is True

    store = app.extensions["daily_attendance"].store
    user = employee_client.get("/api/auth/me").get_json()["user"]
    key = app.extensions["daily_attendance"].attendance_service.today_key(user["employeeId"])
    assert store.subscriber_count(key) == 0


def test_overlong_time_zone_is_a_bad_request(employee_client):
    resp = employee_client.post("/api/attendance/check-in", json={"tz": "Europe/" + "x" * 300})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_error"

    today = employee_client.get("/api/attendance/today", headers={"X-Timezone": "A" * 300})
    assert today.status_code == 400
