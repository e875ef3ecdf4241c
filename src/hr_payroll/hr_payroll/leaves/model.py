from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import as_date, from_iso, inclusive_days, to_iso
from ..core.enums import ApprovalStage, LeaveStatus, LeaveType
from ..core.exceptions import DocumentShapeError


def derive_status(supervisor_approved: Optional[bool], admin_approved: Optional[bool]) -> LeaveStatus:
    """Status is a function of the two approval flags, never stored as authority."""
    if supervisor_approved is False:
        return LeaveStatus.REJECTED
    if supervisor_approved is None:
        return LeaveStatus.PENDING_SUPERVISOR
    if admin_approved is None:
        return LeaveStatus.PENDING_ADMIN
    return LeaveStatus.APPROVED if admin_approved else LeaveStatus.REJECTED


def leave_weight(leave_type: LeaveType) -> float:
    """Day-equivalent of one calendar day of leave."""
    return 0.5 if leave_type == LeaveType.HALF_DAY else 1.0


def _optional_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise ValueError(f"expected true/false/null, got {value!r}")


@dataclass(frozen=True)
class LeaveRequest:
    request_id: str
    employee_id: str
    leave_type: LeaveType
    start_date: date
    end_date: date
    reason: str
    created_at: datetime
    updated_at: datetime
    supervisor_id: Optional[str] = None
    supporting_document_url: Optional[str] = None
    supervisor_approved: Optional[bool] = None
    admin_approved: Optional[bool] = None
    rejection_reason: Optional[str] = None
    rejected_by: Optional[ApprovalStage] = None
    supervisor_decided_by: Optional[str] = None
    supervisor_decided_at: Optional[datetime] = None
    admin_decided_by: Optional[str] = None
    admin_decided_at: Optional[datetime] = None
    appeal_message: Optional[str] = None
    appeal_reviewed: bool = False
    appeal_rejection_reason: Optional[str] = None
    appeal_submitted_at: Optional[datetime] = None
    appeal_reviewed_at: Optional[datetime] = None

    @property
    def status(self) -> LeaveStatus:
        return derive_status(self.supervisor_approved, self.admin_approved)

    @property
    def days_requested(self) -> float:
        return inclusive_days(self.start_date, self.end_date) * leave_weight(self.leave_type)

    @property
    def has_pending_appeal(self) -> bool:
        return bool(self.appeal_message) and not self.appeal_reviewed

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "LeaveRequest":
        try:
            rejected_by = doc.get("rejected_by")
            return cls(
                request_id=str(doc["id"]),
                employee_id=str(doc["employee_id"]),
                leave_type=LeaveType(doc["leave_type"]),
                start_date=as_date(doc["start_date"]),
                end_date=as_date(doc["end_date"]),
                reason=str(doc.get("reason") or ""),
                created_at=from_iso(doc["created_at"]),
                updated_at=from_iso(doc.get("updated_at") or doc["created_at"]),
                supervisor_id=str(doc["supervisor_id"]) if doc.get("supervisor_id") else None,
                supporting_document_url=doc.get("supporting_document_url"),
                supervisor_approved=_optional_bool(doc.get("supervisor_approved")),
                admin_approved=_optional_bool(doc.get("admin_approved")),
                rejection_reason=doc.get("rejection_reason"),
                rejected_by=ApprovalStage(rejected_by) if rejected_by else None,
                supervisor_decided_by=doc.get("supervisor_decided_by"),
                supervisor_decided_at=from_iso(doc.get("supervisor_decided_at")),
                admin_decided_by=doc.get("admin_decided_by"),
                admin_decided_at=from_iso(doc.get("admin_decided_at")),
                appeal_message=doc.get("appeal_message"),
                appeal_reviewed=bool(doc.get("appeal_reviewed", False)),
                appeal_rejection_reason=doc.get("appeal_rejection_reason"),
                appeal_submitted_at=from_iso(doc.get("appeal_submitted_at")),
                appeal_reviewed_at=from_iso(doc.get("appeal_reviewed_at")),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise DocumentShapeError(f"Malformed leave request {doc.get('id')!r}: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "supervisor_id": self.supervisor_id,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
            "supporting_document_url": self.supporting_document_url,
            "days_requested": self.days_requested,
            "status": self.status.value,
            "supervisor_approved": self.supervisor_approved,
            "admin_approved": self.admin_approved,
            "rejection_reason": self.rejection_reason,
            "rejected_by": self.rejected_by.value if self.rejected_by else None,
            "supervisor_decided_by": self.supervisor_decided_by,
            "supervisor_decided_at": to_iso(self.supervisor_decided_at),
            "admin_decided_by": self.admin_decided_by,
            "admin_decided_at": to_iso(self.admin_decided_at),
            "appeal_message": self.appeal_message,
            "appeal_reviewed": self.appeal_reviewed,
            "appeal_rejection_reason": self.appeal_rejection_reason,
            "appeal_submitted_at": to_iso(self.appeal_submitted_at),
            "appeal_reviewed_at": to_iso(self.appeal_reviewed_at),
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    def to_view(self) -> dict[str, Any]:
        return {"id": self.request_id, **self.to_document()}
