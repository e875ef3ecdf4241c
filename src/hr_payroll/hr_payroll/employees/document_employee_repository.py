from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.constants import EMPLOYEES
from ..core.enums import EmployeeStatus
from ..store.base import DocumentStore, unwrap
from .model import Employee
from .repository import EmployeeRepository


class DocumentEmployeeRepository(EmployeeRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        doc = unwrap(self._store.get(EMPLOYEES, str(employee_id)), "Loading employee")
        return Employee.from_document(doc) if doc else None

    def list_active(self) -> Sequence[Employee]:
        docs = unwrap(
            self._store.list(EMPLOYEES, [("status", "==", EmployeeStatus.ACTIVE.value)]),
            "Listing active employees",
        )
        employees = [Employee.from_document(d) for d in docs]
        employees.sort(key=lambda e: e.employee_id)
        return employees

    def create(self, employee: Employee) -> str:
        return unwrap(
            self._store.create(EMPLOYEES, employee.to_document(), doc_id=employee.employee_id or None),
            "Creating employee",
        )

    def update_fields(self, employee_id: str, fields: dict[str, Any]) -> None:
        unwrap(self._store.update(EMPLOYEES, str(employee_id), fields), "Updating employee")

    def delete_by_id(self, employee_id: str) -> None:
        unwrap(self._store.delete(EMPLOYEES, str(employee_id)), "Deleting employee")
