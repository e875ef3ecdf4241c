from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Employee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


class AccessRevoker(Protocol):
    """Auth-side collaborator that removes a person's login access."""

    def revoke(self, employee_id: str) -> None:
        raise NotImplementedError


class LoggingAccessRevoker:
    """Used when no auth backend is wired; records the revocation only."""

    def revoke(self, employee_id: str) -> None:
        logger.info("auth access revoked for employee %s (no auth backend configured)", employee_id)


class EmployeeService:
    """Use case: HR administration of employee records (admin only)."""

    def __init__(
        self,
        employees: EmployeeRepository,
        *,
        access_revoker: Optional[AccessRevoker] = None,
        clock: Callable = now_local,
    ):
        self._employees = employees
        self._revoker = access_revoker or LoggingAccessRevoker()
        self._clock = clock

    def get(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def set_status(self, *, current_role: Role, employee_id: str, status: EmployeeStatus) -> Employee:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change employee status")
        employee = self.get(employee_id)
        self._employees.update_fields(
            employee.employee_id,
            {"status": status.value, "updated_at": self._clock().isoformat()},
        )
        logger.info("employee %s status %s -> %s", employee_id, employee.status.value, status.value)
        return self.get(employee_id)

    def assign_supervisor(self, *, current_role: Role, employee_id: str, supervisor_id: Optional[str]) -> Employee:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can assign supervisors")
        employee = self.get(employee_id)

        if supervisor_id:
            if str(supervisor_id) == employee.employee_id:
                raise ValidationError("An employee cannot supervise themselves")
            supervisor = self.get(supervisor_id)
            if not supervisor.is_supervisor:
                raise ValidationError(f"Employee {supervisor_id} is not flagged as a supervisor")

        self._employees.update_fields(
            employee.employee_id,
            {"supervisor_id": str(supervisor_id) if supervisor_id else None, "updated_at": self._clock().isoformat()},
        )
        return self.get(employee_id)

    def hard_delete(self, *, current_role: Role, employee_id: str) -> None:
        """Permanently remove an employee and revoke their auth access.

        Regular offboarding should use ``set_status`` instead.
        """

        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can delete employees")
        employee = self.get(employee_id)
        self._revoker.revoke(employee.employee_id)
        self._employees.delete_by_id(employee.employee_id)
        logger.warning("employee %s hard-deleted", employee.employee_id)
