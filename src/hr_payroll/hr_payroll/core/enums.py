from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Actor role as stored in the session by the auth layer."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EmployeeStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"
    TERMINATED = "terminated"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored on each daily record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    HALF_DAY = "half_day"


class AttendanceLocation(str, Enum):
    OFFICE = "office"
    REMOTE = "remote"


class LeaveType(str, Enum):
    CASUAL = "casual"
    SICK = "sick"
    UNPAID = "unpaid"
    HALF_DAY = "half_day"
    OTHER = "other"


class LeaveStatus(str, Enum):
    """Leave approval workflow status (derived, see leaves.model.derive_status)."""

    PENDING_SUPERVISOR = "pending_supervisor"
    PENDING_ADMIN = "pending_admin"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalStage(str, Enum):
    SUPERVISOR = "supervisor"
    ADMIN = "admin"


class PayrollStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class PayrollAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class OutcomeStatus(str, Enum):
    """Per-item result of a bulk operation."""

    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"
