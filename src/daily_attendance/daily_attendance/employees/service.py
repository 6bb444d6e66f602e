from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import EMPLOYEE_ID_LENGTH, EMPLOYEE_ID_PREFIX
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from .model import Employee, SessionContext
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


def make_employee_id(user_id: str) -> str:
    return f"{EMPLOYEE_ID_PREFIX}{user_id[:EMPLOYEE_ID_LENGTH].upper()}"


def require_admin(ctx: SessionContext) -> None:
    if not ctx.is_admin:
        raise AuthorizationError("Admin role required")


class EmployeeDirectory:
    """Maps a session identity to the employee id used for attendance."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def employee_id_for(self, user_id: str) -> str:
        return self.context_for(user_id).employee_id

    def context_for(self, user_id: str) -> SessionContext:
        employee = self._employees.get_by_user_id(user_id)
        if not employee or not employee.is_active:
            raise AuthorizationError("No active employee record for this account")
        return SessionContext(user_id=employee.user_id, role=employee.role, employee_id=employee.employee_id)


class AuthService:
    """Use case: authenticate an employee (login)."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def authenticate(self, email: str, password: str) -> SessionContext:
        employee = self._employees.get_by_email((email or "").strip().lower())
        if not employee or not employee.is_active:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(employee.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a placeholder value
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")

        return SessionContext(user_id=employee.user_id, role=employee.role, employee_id=employee.employee_id)


@dataclass(frozen=True)
class ProvisionResult:
    uid: str
    employee: Employee


class ProvisioningService:
    """Use case: create a login identity plus its employee record (one per hire)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        min_password_length: int = 6,
    ):
        self._employees = employees
        self._clock = clock
        self._id_factory = id_factory
        self._min_password_length = int(min_password_length)

    def create_employee_user(
        self,
        *,
        name: Any,
        email: Any,
        password: Any,
        department: Any,
        role: Optional[str] = None,
    ) -> ProvisionResult:
        name = require_non_empty(name, "name")
        email = require_non_empty(email, "email").lower()
        require_non_empty(password, "password")
        password = require_min_length(password, "password", self._min_password_length)
        department = require_non_empty(department, "department")
        resolved_role = Role.ADMIN if role == Role.ADMIN.value else Role.EMPLOYEE

        if "@" not in email:
            raise ValidationError("email is invalid")
        if self._employees.get_by_email(email):
            raise ValidationError("Email already registered")

        now = self._clock()
        uid = self._id_factory()
        employee = Employee(
            user_id=uid,
            employee_id=make_employee_id(uid),
            name=name,
            email=email,
            department=department,
            role=resolved_role,
            password_hash=generate_password_hash(password),
            join_date=now.date(),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        self._employees.create(employee)
        logger.info("Provisioned %s (%s) as %s", employee.employee_id, email, resolved_role.value)
        return ProvisionResult(uid=uid, employee=employee)
