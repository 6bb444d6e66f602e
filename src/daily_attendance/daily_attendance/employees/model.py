from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: a login identity and its employee record.

    Plain data object (no DB access code).
    """

    user_id: str
    employee_id: str
    name: str
    email: str
    department: str
    role: Role
    password_hash: str
    join_date: date
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionContext:
    """Who is calling. Built per request and passed explicitly to services."""

    user_id: str
    role: Role
    employee_id: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
