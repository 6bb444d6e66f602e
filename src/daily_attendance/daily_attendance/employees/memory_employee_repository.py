from __future__ import annotations

import threading
from typing import Dict, Optional

from ..core.exceptions import ValidationError
from .model import Employee
from .repository import EmployeeRepository


class InMemoryEmployeeRepository(EmployeeRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._by_user_id: Dict[str, Employee] = {}

    def get_by_user_id(self, user_id: str) -> Optional[Employee]:
        with self._lock:
            return self._by_user_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[Employee]:
        with self._lock:
            return next((e for e in self._by_user_id.values() if e.email == email), None)

    def create(self, employee: Employee) -> None:
        with self._lock:
            if any(e.email == employee.email for e in self._by_user_id.values()):
                raise ValidationError("Email already registered")
            if employee.user_id in self._by_user_id:
                raise ValidationError("User already exists")
            self._by_user_id[employee.user_id] = employee
