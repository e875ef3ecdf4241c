from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_payroll.hr_payroll.core.enums import ApprovalStage, LeaveStatus, LeaveType
from src.hr_payroll.hr_payroll.core.exceptions import InvalidTransitionError, ValidationError
from src.hr_payroll.hr_payroll.leaves import state_machine
from src.hr_payroll.hr_payroll.leaves.model import LeaveRequest, derive_status

NOW = datetime(2025, 3, 5, 10, 0)


def _request(**overrides) -> LeaveRequest:
    data = dict(
        request_id="L1",
        employee_id="E3",
        supervisor_id="E2",
        leave_type=LeaveType.CASUAL,
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 12),
        reason="Family trip",
        created_at=datetime(2025, 3, 1, 9, 0),
        updated_at=datetime(2025, 3, 1, 9, 0),
    )
    data.update(overrides)
    return LeaveRequest(**data)


@pytest.mark.parametrize(
    "supervisor, admin, expected",
    [
        (None, None, LeaveStatus.PENDING_SUPERVISOR),
        (True, None, LeaveStatus.PENDING_ADMIN),
        (True, True, LeaveStatus.APPROVED),
        (False, None, LeaveStatus.REJECTED),
        (False, True, LeaveStatus.REJECTED),
        (True, False, LeaveStatus.REJECTED),
    ],
)
def test_status_is_derived_from_approval_flags(supervisor, admin, expected):
    assert derive_status(supervisor, admin) == expected


def test_full_approval_sets_both_flags():
    req = state_machine.supervisor_decide(_request(), approve=True, actor_id="E2", now=NOW)
    assert req.status == LeaveStatus.PENDING_ADMIN

    req = state_machine.admin_decide(req, approve=True, actor_id="A1", now=NOW)
    assert req.status == LeaveStatus.APPROVED
    assert req.supervisor_approved is True and req.admin_approved is True
    assert req.admin_decided_by == "A1"
    assert req.updated_at == NOW


def test_supervisor_rejection_requires_reason_and_records_stage():
    with pytest.raises(ValidationError):
        state_machine.supervisor_decide(_request(), approve=False, actor_id="E2", now=NOW, reason="  ")

    req = state_machine.supervisor_decide(_request(), approve=False, actor_id="E2", now=NOW, reason="Deadline")
    assert req.status == LeaveStatus.REJECTED
    assert req.supervisor_approved is False
    assert req.rejected_by == ApprovalStage.SUPERVISOR
    assert req.rejection_reason == "Deadline"


def test_admin_rejection_keeps_supervisor_approval():
    req = state_machine.supervisor_decide(_request(), approve=True, actor_id="E2", now=NOW)
    req = state_machine.admin_decide(req, approve=False, actor_id="A1", now=NOW, reason="Budget")

    assert req.status == LeaveStatus.REJECTED
    assert (req.supervisor_approved, req.admin_approved) == (True, False)
    assert req.rejected_by == ApprovalStage.ADMIN


def test_admin_decision_on_pending_supervisor_fails_and_leaves_request_unchanged():
    original = _request()
    with pytest.raises(InvalidTransitionError):
        state_machine.admin_decide(original, approve=True, actor_id="A1", now=NOW)

    assert original.status == LeaveStatus.PENDING_SUPERVISOR
    assert original.admin_approved is None


def test_decisions_on_final_states_fail():
    approved = _request(supervisor_approved=True, admin_approved=True)
    with pytest.raises(InvalidTransitionError):
        state_machine.supervisor_decide(approved, approve=False, actor_id="E2", now=NOW, reason="x")
    with pytest.raises(InvalidTransitionError):
        state_machine.admin_decide(approved, approve=False, actor_id="A1", now=NOW, reason="x")


def test_appeal_keeps_rejected_status_and_is_allowed_once():
    rejected = state_machine.supervisor_decide(_request(), approve=False, actor_id="E2", now=NOW, reason="No")

    appealed = state_machine.appeal(rejected, message="Please reconsider", now=NOW)
    assert appealed.status == LeaveStatus.REJECTED
    assert appealed.appeal_message == "Please reconsider"
    assert appealed.appeal_reviewed is False

    with pytest.raises(InvalidTransitionError):
        state_machine.appeal(appealed, message="Again", now=NOW)


def test_appeal_only_from_rejected():
    with pytest.raises(InvalidTransitionError):
        state_machine.appeal(_request(), message="Why?", now=NOW)


def test_accepted_appeal_reopens_request():
    rejected = state_machine.supervisor_decide(_request(), approve=False, actor_id="E2", now=NOW, reason="No")
    appealed = state_machine.appeal(rejected, message="Please", now=NOW)

    reopened = state_machine.review_appeal(appealed, accept=True, now=NOW)
    assert reopened.status == LeaveStatus.PENDING_SUPERVISOR
    assert reopened.appeal_reviewed is True
    assert reopened.rejection_reason is None
    assert reopened.rejected_by is None


def test_rejected_appeal_needs_reason_and_blocks_another_appeal():
    rejected = state_machine.supervisor_decide(_request(), approve=False, actor_id="E2", now=NOW, reason="No")
    appealed = state_machine.appeal(rejected, message="Please", now=NOW)

    with pytest.raises(ValidationError):
        state_machine.review_appeal(appealed, accept=False, now=NOW)

    reviewed = state_machine.review_appeal(appealed, accept=False, now=NOW, reason="Still no")
    assert reviewed.status == LeaveStatus.REJECTED
    assert reviewed.appeal_reviewed is True
    assert reviewed.appeal_rejection_reason == "Still no"

    with pytest.raises(InvalidTransitionError):
        state_machine.appeal(reviewed, message="One more", now=NOW)
    with pytest.raises(InvalidTransitionError):
        state_machine.review_appeal(reviewed, accept=True, now=NOW)


def test_half_day_leave_counts_half_per_day():
    assert _request(leave_type=LeaveType.HALF_DAY).days_requested == 1.5
    assert _request().days_requested == 3
