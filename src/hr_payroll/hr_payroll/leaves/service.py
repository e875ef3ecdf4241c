from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from . import state_machine
from .model import LeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


class LeaveApprovalService:
    """Use case: two-stage leave approval with a single appeal per rejection.

    Stage one is decided by the employee's supervisor (or an admin, which
    covers employees without one), stage two by an admin.
    """

    def __init__(
        self,
        requests: LeaveRequestRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable = now_local,
    ):
        self._requests = requests
        self._employees = employees
        self._clock = clock

    def _load(self, request_id: str) -> LeaveRequest:
        request = self._requests.get_by_id(request_id)
        if not request:
            raise NotFoundError(f"Leave request {request_id} not found")
        return request

    @staticmethod
    def _require_supervisor_or_admin(request: LeaveRequest, *, current_role: Role, current_user_id: str) -> None:
        if current_role == Role.ADMIN:
            return
        if request.supervisor_id and request.supervisor_id == str(current_user_id):
            return
        raise AuthorizationError("Only the designated supervisor or an admin can act on this request")

    def _commit(self, before: LeaveRequest, after: LeaveRequest, action: str, actor: str) -> LeaveRequest:
        self._requests.save(after)
        logger.info(
            "leave request %s %s by %s: %s -> %s",
            after.request_id,
            action,
            actor,
            before.status.value,
            after.status.value,
        )
        return after

    def submit(
        self,
        *,
        current_role: Role,
        current_user_id: str,
        employee_id: str,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
        supporting_document_url: Optional[str] = None,
    ) -> LeaveRequest:
        if current_role != Role.ADMIN and str(employee_id) != str(current_user_id):
            raise AuthorizationError("Employees can only request leave for themselves")
        reason = require_non_empty(reason, "Reason")
        if end_date < start_date:
            raise ValidationError("End date cannot be before start date")

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        now = self._clock()
        request = LeaveRequest(
            request_id="",
            employee_id=employee.employee_id,
            supervisor_id=employee.supervisor_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            supporting_document_url=(supporting_document_url or "").strip() or None,
            created_at=now,
            updated_at=now,
        )
        request_id = self._requests.create(request)
        logger.info(
            "leave request %s submitted by %s (%s, %s..%s)",
            request_id,
            employee.employee_id,
            leave_type.value,
            start_date,
            end_date,
        )
        return self._load(request_id)

    def supervisor_decide(
        self,
        *,
        current_role: Role,
        current_user_id: str,
        request_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        request = self._load(request_id)
        self._require_supervisor_or_admin(request, current_role=current_role, current_user_id=current_user_id)
        updated = state_machine.supervisor_decide(
            request,
            approve=approve,
            actor_id=str(current_user_id),
            reason=reason,
            now=self._clock(),
        )
        return self._commit(request, updated, "supervisor approved" if approve else "supervisor rejected", current_user_id)

    def admin_decide(
        self,
        *,
        current_role: Role,
        current_user_id: str,
        request_id: str,
        approve: bool,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can make the final leave decision")
        request = self._load(request_id)
        updated = state_machine.admin_decide(
            request,
            approve=approve,
            actor_id=str(current_user_id),
            reason=reason,
            now=self._clock(),
        )
        return self._commit(request, updated, "admin approved" if approve else "admin rejected", current_user_id)

    def appeal(self, *, current_user_id: str, request_id: str, message: str) -> LeaveRequest:
        request = self._load(request_id)
        if request.employee_id != str(current_user_id):
            raise AuthorizationError("Only the employee who made the request can appeal it")
        updated = state_machine.appeal(request, message=message, now=self._clock())
        return self._commit(request, updated, "appealed", current_user_id)

    def review_appeal(
        self,
        *,
        current_role: Role,
        current_user_id: str,
        request_id: str,
        accept: bool,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        request = self._load(request_id)
        self._require_supervisor_or_admin(request, current_role=current_role, current_user_id=current_user_id)
        updated = state_machine.review_appeal(request, accept=accept, reason=reason, now=self._clock())
        return self._commit(request, updated, "appeal accepted" if accept else "appeal rejected", current_user_id)

    def count_unreviewed_appeals(self, supervisor_id: Optional[str] = None) -> int:
        rejected = self._requests.list(status=LeaveStatus.REJECTED, supervisor_id=supervisor_id)
        return sum(1 for r in rejected if r.has_pending_appeal)

    def list_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
        supervisor_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        return self._requests.list(status=status, employee_id=employee_id, supervisor_id=supervisor_id)

    def pending_for_supervisor(self, supervisor_id: str) -> Sequence[LeaveRequest]:
        return self._requests.list(status=LeaveStatus.PENDING_SUPERVISOR, supervisor_id=supervisor_id)

    def pending_for_admin(self) -> Sequence[LeaveRequest]:
        return self._requests.list(status=LeaveStatus.PENDING_ADMIN)

    def for_employee(self, employee_id: str) -> Sequence[LeaveRequest]:
        return self._requests.list(employee_id=employee_id)
