from __future__ import annotations

from typing import Optional

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, store_errors, to_mysql_datetime
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    user_id, employee_id, name, email, department, role, password_hash,
    join_date, is_active, created_at, updated_at
"""


def _row_to_employee(row: dict) -> Employee:
    return Employee(
        user_id=row["user_id"],
        employee_id=row["employee_id"],
        name=row["name"],
        email=row["email"],
        department=row["department"],
        role=Role(row["role"]),
        password_hash=row["password_hash"],
        join_date=row["join_date"],
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, column: str, value: str) -> Optional[Employee]:
        with store_errors("reading employees"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {column}=%s", (value,))
            row = fetchone(cur)
            return _row_to_employee(row) if row else None

    def get_by_user_id(self, user_id: str) -> Optional[Employee]:
        return self._get_one("user_id", user_id)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email", email)

    def create(self, employee: Employee) -> None:
        with store_errors("creating employee"):
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(
                        """
                        INSERT INTO employees(user_id, employee_id, name, email, department, role,
                                              password_hash, join_date, is_active, created_at, updated_at)
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            employee.user_id,
                            employee.employee_id,
                            employee.name,
                            employee.email,
                            employee.department,
                            employee.role.value,
                            employee.password_hash,
                            employee.join_date,
                            1 if employee.is_active else 0,
                            to_mysql_datetime(employee.created_at) if employee.created_at else None,
                            to_mysql_datetime(employee.updated_at) if employee.updated_at else None,
                        ),
                    )
            except mysql.connector.IntegrityError as exc:
                raise ValidationError("Email already registered") from exc
