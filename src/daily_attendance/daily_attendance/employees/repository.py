from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_user_id(self, user_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> None:
        """Persist a new employee. Raises ValidationError when the email is taken."""

        raise NotImplementedError
