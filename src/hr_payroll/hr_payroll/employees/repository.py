from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for Employee.

    Note: services depend on this interface, not on a concrete store.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> str:
        raise NotImplementedError

    def update_fields(self, employee_id: str, fields: dict[str, Any]) -> None:
        raise NotImplementedError

    def delete_by_id(self, employee_id: str) -> None:
        raise NotImplementedError
