from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import format_ymd, from_iso, parse_iso_date, to_iso
from ..core.enums import AttendanceStatus, DayState, PunchMethod


def attendance_key(employee_id: str, work_date: date) -> str:
    """Document id of one employee's record for one calendar day."""
    return f"{employee_id}_{format_ymd(work_date)}"


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def to_document(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_document(cls, data: Optional[Mapping[str, Any]]) -> Optional["GeoPoint"]:
        if not data:
            return None
        return cls(latitude=float(data["latitude"]), longitude=float(data["longitude"]))


@dataclass(frozen=True)
class Punch:
    """One check-in or check-out.

    ``timestamp`` is None when the stored value cannot be read (e.g. not yet
    resolved by the server).
    """

    timestamp: Optional[datetime]
    method: PunchMethod
    location: Optional[GeoPoint] = None

    def to_document(self) -> dict:
        doc: dict = {"timestamp": to_iso(self.timestamp), "method": self.method.value}
        if self.location is not None:
            doc["location"] = self.location.to_document()
        return doc

    @classmethod
    def from_document(cls, data: Optional[Mapping[str, Any]]) -> Optional["Punch"]:
        if not data:
            return None
        try:
            timestamp = from_iso(data.get("timestamp"))
        except (TypeError, ValueError):
            timestamp = None
        return cls(
            timestamp=timestamp,
            method=PunchMethod(data.get("method", PunchMethod.MANUAL.value)),
            location=GeoPoint.from_document(data.get("location")),
        )


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day.

    Stored as a camelCase document keyed by ``attendance_key``.
    """

    employee_id: str
    work_date: date
    status: AttendanceStatus
    check_in: Optional[Punch] = None
    check_out: Optional[Punch] = None
    total_hours: Optional[float] = None
    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        return attendance_key(self.employee_id, self.work_date)

    @property
    def state(self) -> DayState:
        if self.check_out is not None:
            return DayState.CHECKED_OUT
        if self.check_in is not None:
            return DayState.CHECKED_IN
        return DayState.EMPTY

    def to_document(self) -> dict:
        doc: dict = {
            "employeeId": self.employee_id,
            "date": format_ymd(self.work_date),
            "status": self.status.value,
        }
        if self.check_in is not None:
            doc["checkIn"] = self.check_in.to_document()
        if self.check_out is not None:
            doc["checkOut"] = self.check_out.to_document()
        if self.total_hours is not None:
            doc["totalHours"] = self.total_hours
        if self.created_at is not None:
            doc["createdAt"] = to_iso(self.created_at)
        if self.updated_at is not None:
            doc["updatedAt"] = to_iso(self.updated_at)
        return doc

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "AttendanceRecord":
        total = doc.get("totalHours")
        return cls(
            employee_id=str(doc["employeeId"]),
            work_date=parse_iso_date(doc["date"]),
            status=AttendanceStatus(doc.get("status", AttendanceStatus.PRESENT.value)),
            check_in=Punch.from_document(doc.get("checkIn")),
            check_out=Punch.from_document(doc.get("checkOut")),
            total_hours=float(total) if total is not None else None,
            created_at=_lenient_timestamp(doc.get("createdAt")),
            updated_at=_lenient_timestamp(doc.get("updatedAt")),
        )


def _lenient_timestamp(value) -> Optional[datetime]:
    try:
        return from_iso(value)
    except (TypeError, ValueError):
        return None
