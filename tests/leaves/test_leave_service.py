from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_payroll.hr_payroll.core.enums import LeaveStatus, LeaveType, Role
from src.hr_payroll.hr_payroll.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.hr_payroll.hr_payroll.employees.document_employee_repository import DocumentEmployeeRepository
from src.hr_payroll.hr_payroll.leaves.document_leave_repository import DocumentLeaveRequestRepository
from src.hr_payroll.hr_payroll.leaves.service import LeaveApprovalService
from src.hr_payroll.hr_payroll.store.memory_store import InMemoryDocumentStore


def _service():
    store = InMemoryDocumentStore(
        seed={
            "employees": {
                "E2": {"name": "Lead", "status": "active", "is_supervisor": True},
                "E3": {"name": "Dev", "status": "active", "supervisor_id": "E2"},
                "E4": {"name": "Solo", "status": "active"},
            }
        }
    )
    repo = DocumentLeaveRequestRepository(store)
    service = LeaveApprovalService(repo, DocumentEmployeeRepository(store), clock=lambda: datetime(2025, 3, 1, 9, 0))
    return service, repo


def _submit(service, employee_id="E3", **overrides):
    kwargs = dict(
        current_role=Role.EMPLOYEE,
        current_user_id=employee_id,
        employee_id=employee_id,
        leave_type=LeaveType.CASUAL,
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 11),
        reason="Family event",
    )
    kwargs.update(overrides)
    return service.submit(**kwargs)


def test_submit_starts_pending_supervisor_with_denormalized_supervisor():
    service, _ = _service()
    req = _submit(service)

    assert req.status == LeaveStatus.PENDING_SUPERVISOR
    assert req.supervisor_approved is None and req.admin_approved is None
    assert req.supervisor_id == "E2"
    assert req.request_id


def test_submit_validations():
    service, _ = _service()

    with pytest.raises(ValidationError):
        _submit(service, start_date=date(2025, 3, 12), end_date=date(2025, 3, 10))
    with pytest.raises(ValidationError):
        _submit(service, reason="   ")
    with pytest.raises(AuthorizationError):
        _submit(service, employee_id="E4", current_user_id="E3")
    with pytest.raises(NotFoundError):
        service.submit(
            current_role=Role.ADMIN,
            current_user_id="A1",
            employee_id="ghost",
            leave_type=LeaveType.SICK,
            start_date=date(2025, 3, 10),
            end_date=date(2025, 3, 10),
            reason="x",
        )


def test_two_stage_approval():
    service, repo = _service()
    req = _submit(service)

    service.supervisor_decide(current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, approve=True)
    service.admin_decide(current_role=Role.ADMIN, current_user_id="A1", request_id=req.request_id, approve=True)

    stored = repo.get_by_id(req.request_id)
    assert stored.status == LeaveStatus.APPROVED
    assert stored.supervisor_approved is True and stored.admin_approved is True


def test_rejection_has_exactly_one_false_flag_and_a_reason():
    service, repo = _service()
    req = _submit(service)

    service.supervisor_decide(
        current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, approve=False, reason="Crunch"
    )
    stored = repo.get_by_id(req.request_id)

    flags = [stored.supervisor_approved, stored.admin_approved]
    assert stored.status == LeaveStatus.REJECTED
    assert flags.count(False) == 1
    assert stored.rejection_reason == "Crunch"


def test_only_designated_supervisor_or_admin_decides_stage_one():
    service, _ = _service()
    req = _submit(service)

    with pytest.raises(AuthorizationError):
        service.supervisor_decide(current_role=Role.EMPLOYEE, current_user_id="E4", request_id=req.request_id, approve=True)

    solo = _submit(service, employee_id="E4")
    assert solo.supervisor_id is None
    decided = service.supervisor_decide(current_role=Role.ADMIN, current_user_id="A1", request_id=solo.request_id, approve=True)
    assert decided.status == LeaveStatus.PENDING_ADMIN


def test_admin_decision_requires_admin_role():
    service, _ = _service()
    req = _submit(service)
    service.supervisor_decide(current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, approve=True)

    with pytest.raises(AuthorizationError):
        service.admin_decide(current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, approve=True)


def test_admin_decision_out_of_order_leaves_stored_record_unchanged():
    service, repo = _service()
    req = _submit(service)
    before = repo.get_by_id(req.request_id)

    with pytest.raises(InvalidTransitionError):
        service.admin_decide(current_role=Role.ADMIN, current_user_id="A1", request_id=req.request_id, approve=True)

    assert repo.get_by_id(req.request_id) == before


def test_unknown_request_is_not_found():
    service, _ = _service()
    with pytest.raises(NotFoundError):
        service.admin_decide(current_role=Role.ADMIN, current_user_id="A1", request_id="missing", approve=True)


def test_appeal_flow_and_badge_count():
    service, repo = _service()
    req = _submit(service)
    service.supervisor_decide(
        current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, approve=False, reason="No cover"
    )

    with pytest.raises(AuthorizationError):
        service.appeal(current_user_id="E4", request_id=req.request_id, message="Not mine")

    service.appeal(current_user_id="E3", request_id=req.request_id, message="I arranged cover")
    stored = repo.get_by_id(req.request_id)
    assert stored.status == LeaveStatus.REJECTED
    assert stored.appeal_reviewed is False
    assert service.count_unreviewed_appeals() == 1
    assert service.count_unreviewed_appeals("E2") == 1
    assert service.count_unreviewed_appeals("E9") == 0

    reopened = service.review_appeal(
        current_role=Role.EMPLOYEE, current_user_id="E2", request_id=req.request_id, accept=True
    )
    assert reopened.status == LeaveStatus.PENDING_SUPERVISOR
    assert reopened.appeal_reviewed is True
    assert service.count_unreviewed_appeals() == 0


def test_listings():
    service, _ = _service()
    first = _submit(service)
    second = _submit(service)
    service.supervisor_decide(current_role=Role.EMPLOYEE, current_user_id="E2", request_id=second.request_id, approve=True)

    assert [r.request_id for r in service.pending_for_supervisor("E2")] == [first.request_id]
    assert [r.request_id for r in service.pending_for_admin()] == [second.request_id]
    assert {r.request_id for r in service.for_employee("E3")} == {first.request_id, second.request_id}
