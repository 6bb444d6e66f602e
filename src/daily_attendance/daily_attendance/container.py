from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional

from .attendance.memory_attendance_store import InMemoryAttendanceStore
from .attendance.mysql_attendance_store import MySQLAttendanceStore
from .attendance.repository import AttendanceStore
from .attendance.service import AttendanceService
from .common.datetime_utils import now_utc
from .core.constants import DEFAULT_TIMEZONE, DEFAULT_TX_BACKOFF_SECONDS, DEFAULT_TX_MAX_ATTEMPTS
from .database.connection import DBConfig, DatabaseConnection
from .employees.memory_employee_repository import InMemoryEmployeeRepository
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeDirectory, ProvisioningService


@dataclass(frozen=True)
class Container:
    store: AttendanceStore
    employees_repo: EmployeeRepository

    attendance_service: AttendanceService
    auth_service: AuthService
    directory: EmployeeDirectory
    provisioning_service: ProvisioningService

    conn: Optional[DatabaseConnection] = None


def build_container(*, config: Mapping, clock: Callable[[], datetime] = now_utc) -> Container:
    backend = str(config.get("STORE_BACKEND", "memory")).lower()
    conn: Optional[DatabaseConnection] = None

    if backend == "mysql":
        conn = DatabaseConnection(DBConfig.from_dict(config["DB_CONFIG"]))
        store: AttendanceStore = MySQLAttendanceStore(conn, clock=clock)
        employees_repo: EmployeeRepository = MySQLEmployeeRepository(conn)
    elif backend == "memory":
        store = InMemoryAttendanceStore(clock=clock)
        employees_repo = InMemoryEmployeeRepository()
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")

    attendance_service = AttendanceService(
        store,
        default_timezone=str(config.get("DEFAULT_TIMEZONE", DEFAULT_TIMEZONE)),
        max_attempts=int(config.get("TX_MAX_ATTEMPTS", DEFAULT_TX_MAX_ATTEMPTS)),
        backoff_seconds=float(config.get("TX_BACKOFF_SECONDS", DEFAULT_TX_BACKOFF_SECONDS)),
    )

    return Container(
        store=store,
        employees_repo=employees_repo,
        attendance_service=attendance_service,
        auth_service=AuthService(employees_repo),
        directory=EmployeeDirectory(employees_repo),
        provisioning_service=ProvisioningService(employees_repo, clock=clock),
        conn=conn,
    )
