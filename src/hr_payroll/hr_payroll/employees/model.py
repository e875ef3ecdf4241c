from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import coerce_number
from ..core.enums import EmployeeStatus
from ..core.exceptions import DocumentShapeError


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee.

    ``salary`` is None when the stored value is missing or not a number;
    payroll computation refuses to run on such a record.
    """

    employee_id: str
    name: str
    email: str
    status: EmployeeStatus
    department: Optional[str] = None
    designation: Optional[str] = None
    supervisor_id: Optional[str] = None
    is_supervisor: bool = False
    salary: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Employee":
        try:
            return cls(
                employee_id=str(doc["id"]),
                name=str(doc.get("name") or ""),
                email=str(doc.get("email") or ""),
                status=EmployeeStatus(doc.get("status") or EmployeeStatus.ACTIVE.value),
                department=doc.get("department"),
                designation=doc.get("designation"),
                supervisor_id=str(doc["supervisor_id"]) if doc.get("supervisor_id") else None,
                is_supervisor=bool(doc.get("is_supervisor", False)),
                salary=coerce_number(doc.get("salary")),
            )
        except (KeyError, ValueError) as exc:
            raise DocumentShapeError(f"Malformed employee document {doc.get('id')!r}: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "status": self.status.value,
            "department": self.department,
            "designation": self.designation,
            "supervisor_id": self.supervisor_id,
            "is_supervisor": self.is_supervisor,
            "salary": self.salary,
        }
