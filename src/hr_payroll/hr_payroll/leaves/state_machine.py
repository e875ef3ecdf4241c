"""Leave approval transitions.

Each function takes a request and returns a new one; none of them touch
storage. A transition attempted from the wrong state raises
``InvalidTransitionError`` and the caller keeps the original object.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalStage, LeaveStatus
from ..core.exceptions import InvalidTransitionError, ValidationError
from .model import LeaveRequest


def _require_status(request: LeaveRequest, expected: LeaveStatus, action: str) -> None:
    if request.status != expected:
        raise InvalidTransitionError(
            f"Cannot {action}: leave request {request.request_id} is {request.status.value}, "
            f"expected {expected.value}"
        )


def _require_reason(reason: Optional[str]) -> str:
    text = (reason or "").strip()
    if not text:
        raise ValidationError("A reason is required when rejecting")
    return text


def _rejected(request: LeaveRequest, *, stage: ApprovalStage, reason: str, now: datetime, **changes) -> LeaveRequest:
    # A fresh rejection opens a fresh appeal slot.
    return replace(
        request,
        rejection_reason=reason,
        rejected_by=stage,
        appeal_message=None,
        appeal_reviewed=False,
        appeal_rejection_reason=None,
        appeal_submitted_at=None,
        appeal_reviewed_at=None,
        updated_at=now,
        **changes,
    )


def supervisor_decide(
    request: LeaveRequest,
    *,
    approve: bool,
    actor_id: str,
    now: datetime,
    reason: Optional[str] = None,
) -> LeaveRequest:
    _require_status(request, LeaveStatus.PENDING_SUPERVISOR, "record supervisor decision")
    if approve:
        return replace(
            request,
            supervisor_approved=True,
            supervisor_decided_by=actor_id,
            supervisor_decided_at=now,
            updated_at=now,
        )
    return _rejected(
        request,
        stage=ApprovalStage.SUPERVISOR,
        reason=_require_reason(reason),
        now=now,
        supervisor_approved=False,
        supervisor_decided_by=actor_id,
        supervisor_decided_at=now,
    )


def admin_decide(
    request: LeaveRequest,
    *,
    approve: bool,
    actor_id: str,
    now: datetime,
    reason: Optional[str] = None,
) -> LeaveRequest:
    _require_status(request, LeaveStatus.PENDING_ADMIN, "record admin decision")
    if approve:
        return replace(
            request,
            admin_approved=True,
            admin_decided_by=actor_id,
            admin_decided_at=now,
            updated_at=now,
        )
    return _rejected(
        request,
        stage=ApprovalStage.ADMIN,
        reason=_require_reason(reason),
        now=now,
        admin_approved=False,
        admin_decided_by=actor_id,
        admin_decided_at=now,
    )


def appeal(request: LeaveRequest, *, message: str, now: datetime) -> LeaveRequest:
    """Attach an appeal to a rejected request. Status stays ``rejected``."""

    _require_status(request, LeaveStatus.REJECTED, "appeal")
    if request.appeal_message:
        raise InvalidTransitionError(f"Leave request {request.request_id} has already been appealed")
    text = (message or "").strip()
    if not text:
        raise ValidationError("Appeal message is required")
    return replace(
        request,
        appeal_message=text,
        appeal_reviewed=False,
        appeal_submitted_at=now,
        updated_at=now,
    )


def review_appeal(
    request: LeaveRequest,
    *,
    accept: bool,
    now: datetime,
    reason: Optional[str] = None,
) -> LeaveRequest:
    """Accepting re-opens the request at the supervisor stage."""

    _require_status(request, LeaveStatus.REJECTED, "review appeal")
    if not request.has_pending_appeal:
        raise InvalidTransitionError(f"Leave request {request.request_id} has no appeal awaiting review")

    if accept:
        return replace(
            request,
            supervisor_approved=None,
            admin_approved=None,
            rejection_reason=None,
            rejected_by=None,
            supervisor_decided_by=None,
            supervisor_decided_at=None,
            admin_decided_by=None,
            admin_decided_at=None,
            appeal_reviewed=True,
            appeal_reviewed_at=now,
            updated_at=now,
        )

    text = (reason or "").strip()
    if not text:
        raise ValidationError("A reason is required when rejecting an appeal")
    return replace(
        request,
        appeal_reviewed=True,
        appeal_rejection_reason=text,
        appeal_reviewed_at=now,
        updated_at=now,
    )
