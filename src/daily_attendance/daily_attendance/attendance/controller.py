from __future__ import annotations

import hmac
import io
import json
import queue
from typing import Optional

import qrcode
from flask import Flask, Response, jsonify, request, send_file, session

from ..common.validators import optional_coordinate
from ..common.web import login_required
from ..container import Container
from ..core.enums import DayState, PunchMethod
from ..core.exceptions import ValidationError
from ..employees.model import SessionContext
from .live import LiveAttendanceView, LiveSnapshot
from .metrics import display_hours, format_hours
from .model import AttendanceRecord, GeoPoint


def _parse_location(data: dict) -> Optional[GeoPoint]:
    """Accept ``{"location": {"latitude", "longitude"}}`` or the two keys at top level."""
    source = data.get("location") if isinstance(data.get("location"), dict) else data
    latitude = optional_coordinate(source.get("latitude"), "latitude", limit=90)
    longitude = optional_coordinate(source.get("longitude"), "longitude", limit=180)
    if latitude is None and longitude is None:
        return None
    if latitude is None or longitude is None:
        raise ValidationError("latitude and longitude must be sent together")
    return GeoPoint(latitude=latitude, longitude=longitude)


def _request_tz(data: dict) -> Optional[str]:
    return data.get("tz") or request.args.get("tz") or request.headers.get("X-Timezone")


def snapshot_payload(record: Optional[AttendanceRecord], state: DayState, hours: Optional[float]) -> dict:
    return {
        "record": record.to_document() if record else None,
        "state": state.value,
        "checkedIn": state == DayState.CHECKED_IN,
        "hours": hours,
        "hoursText": format_hours(hours),
    }


def _live_payload(snap: LiveSnapshot) -> dict:
    return snapshot_payload(snap.record, snap.state, snap.hours)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def current_context() -> SessionContext:
        return container.directory.context_for(str(session["user_id"]))

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in():
        ctx = current_context()
        data = request.get_json(silent=True) or {}
        service.check_in(ctx.employee_id, location=_parse_location(data), tz=_request_tz(data))
        return jsonify({"success": True, "message": "Checked in"})

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="check_out")
    @login_required
    def check_out():
        ctx = current_context()
        data = request.get_json(silent=True) or {}
        service.check_out(ctx.employee_id, location=_parse_location(data), tz=_request_tz(data))
        return jsonify({"success": True, "message": "Checked out"})

    @app.route("/api/attendance/qr", methods=["POST"], endpoint="qr_punch")
    @login_required
    def qr_punch():
        """Punch with the office QR token; ``action`` picks check-in (default) or check-out."""
        ctx = current_context()
        data = request.get_json(silent=True) or {}
        qr_code = str(data.get("qr_code", "")).strip()
        if not qr_code:
            raise ValidationError("qr_code is required")

        expected = str(app.config.get("QR_TOKEN", ""))
        if not hmac.compare_digest(qr_code.encode("utf-8"), expected.encode("utf-8")):
            raise ValidationError("Invalid QR code")

        action = str(data.get("action", "check-in"))
        location = _parse_location(data)
        if action == "check-in":
            service.check_in(ctx.employee_id, location=location, tz=_request_tz(data), method=PunchMethod.QR)
            return jsonify({"success": True, "action": action, "message": "Checked in with QR"})
        if action == "check-out":
            service.check_out(ctx.employee_id, location=location, tz=_request_tz(data), method=PunchMethod.QR)
            return jsonify({"success": True, "action": action, "message": "Checked out with QR"})
        raise ValidationError("action must be check-in or check-out")

    @app.route("/api/attendance/qr/image", methods=["GET"], endpoint="qr_image")
    @login_required
    def qr_image():
        """Office QR code (PNG) that employees scan to punch."""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(str(app.config.get("QR_TOKEN", "")))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="today")
    @login_required
    def today():
        ctx = current_context()
        tz = _request_tz({})
        record = service.get_today(ctx.employee_id, tz=tz)
        state = record.state if record else DayState.EMPTY
        hours = display_hours(record, container.store.server_time())
        return jsonify({"success": True, **snapshot_payload(record, state, hours)})

    @app.route("/api/attendance/today/stream", methods=["GET"], endpoint="today_stream")
    @login_required
    def today_stream():
        """Server-Sent Events: one ``data:`` line per change, plus running hours while checked in."""
        ctx = current_context()
        tz = _request_tz({})
        keepalive = float(app.config.get("STREAM_KEEPALIVE_SECONDS", 15))
        updates: "queue.Queue[LiveSnapshot]" = queue.Queue()

        view = LiveAttendanceView(
            service,
            ctx.employee_id,
            updates.put,
            tz=tz,
            interval=float(app.config.get("RUNNING_HOURS_INTERVAL_SECONDS", 30)),
            clock=container.store.server_time,
        ).open()

        def generate():
            try:
                while True:
                    try:
                        snap = updates.get(timeout=keepalive)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield f"data: {json.dumps(_live_payload(snap))}\n\n"
            finally:
                view.close()

        return Response(generate(), mimetype="text/event-stream", headers={"Cache-Control": "no-cache"})
