from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import from_iso, to_iso
from ..common.validators import coerce_number
from ..core.enums import OutcomeStatus, PayrollStatus
from ..core.exceptions import DocumentShapeError

EDITABLE_FIELDS = ("festival_bonus", "loan_deduction", "lunch_subsidy", "ait")


def payroll_record_id(employee_id: str, month: int, year: int) -> str:
    """One record per employee per period."""
    return f"{employee_id}_{int(year)}_{int(month):02d}"


def _amount(doc: dict[str, Any], key: str) -> float:
    return coerce_number(doc.get(key)) or 0.0


@dataclass(frozen=True)
class PayrollRecord:
    """Monthly payroll for one employee.

    ``total_deduction`` and ``net_payable_salary`` are always the output of
    the payroll calculator for the other fields; see ``PayrollService``.
    """

    employee_id: str
    month: int
    year: int
    basic_salary: Optional[float]
    festival_bonus: float = 0.0
    loan_deduction: float = 0.0
    lunch_subsidy: float = 0.0
    ait: float = 0.0
    total_present_days: float = 0
    total_absent_days: float = 0
    total_late_days: int = 0
    total_half_days: int = 0
    casual_leave_taken: float = 0
    sick_leave_taken: float = 0
    unpaid_leave_days: float = 0
    late_penalty_days: int = 0
    late_penalty: float = 0.0
    unpaid_leave_deduction: float = 0.0
    half_day_deduction: float = 0.0
    absent_deduction: float = 0.0
    total_deduction: float = 0.0
    net_payable_salary: float = 0.0
    status: PayrollStatus = PayrollStatus.PENDING
    employee_name: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def record_id(self) -> str:
        return payroll_record_id(self.employee_id, self.month, self.year)

    def with_breakdown(self, breakdown) -> "PayrollRecord":
        return replace(
            self,
            late_penalty_days=breakdown.late_penalty_days,
            late_penalty=breakdown.late_penalty,
            unpaid_leave_deduction=breakdown.unpaid_leave_deduction,
            half_day_deduction=breakdown.half_day_deduction,
            absent_deduction=breakdown.absent_deduction,
            total_deduction=breakdown.total_deduction,
            net_payable_salary=breakdown.net_payable,
        )

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PayrollRecord":
        try:
            return cls(
                employee_id=str(doc["employee_id"]),
                month=int(doc["month"]),
                year=int(doc["year"]),
                basic_salary=coerce_number(doc.get("basic_salary")),
                festival_bonus=_amount(doc, "festival_bonus"),
                loan_deduction=_amount(doc, "loan_deduction"),
                lunch_subsidy=_amount(doc, "lunch_subsidy"),
                ait=_amount(doc, "ait"),
                total_present_days=_amount(doc, "total_present_days"),
                total_absent_days=_amount(doc, "total_absent_days"),
                total_late_days=int(_amount(doc, "total_late_days")),
                total_half_days=int(_amount(doc, "total_half_days")),
                casual_leave_taken=_amount(doc, "casual_leave_taken"),
                sick_leave_taken=_amount(doc, "sick_leave_taken"),
                unpaid_leave_days=_amount(doc, "unpaid_leave_days"),
                late_penalty_days=int(_amount(doc, "late_penalty_days")),
                late_penalty=_amount(doc, "late_penalty"),
                unpaid_leave_deduction=_amount(doc, "unpaid_leave_deduction"),
                half_day_deduction=_amount(doc, "half_day_deduction"),
                absent_deduction=_amount(doc, "absent_deduction"),
                total_deduction=_amount(doc, "total_deduction"),
                net_payable_salary=_amount(doc, "net_payable_salary"),
                status=PayrollStatus(doc.get("status") or PayrollStatus.PENDING.value),
                employee_name=doc.get("employee_name"),
                approved_by=doc.get("approved_by"),
                approved_at=from_iso(doc.get("approved_at")),
                rejected_by=doc.get("rejected_by"),
                rejected_at=from_iso(doc.get("rejected_at")),
                paid_at=from_iso(doc.get("paid_at")),
                created_at=from_iso(doc.get("created_at")),
                updated_at=from_iso(doc.get("updated_at")),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise DocumentShapeError(f"Malformed payroll document {doc.get('id')!r}: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "month": self.month,
            "year": self.year,
            "basic_salary": self.basic_salary,
            "festival_bonus": self.festival_bonus,
            "loan_deduction": self.loan_deduction,
            "lunch_subsidy": self.lunch_subsidy,
            "ait": self.ait,
            "total_present_days": self.total_present_days,
            "total_absent_days": self.total_absent_days,
            "total_late_days": self.total_late_days,
            "total_half_days": self.total_half_days,
            "casual_leave_taken": self.casual_leave_taken,
            "sick_leave_taken": self.sick_leave_taken,
            "unpaid_leave_days": self.unpaid_leave_days,
            "late_penalty_days": self.late_penalty_days,
            "late_penalty": self.late_penalty,
            "unpaid_leave_deduction": self.unpaid_leave_deduction,
            "half_day_deduction": self.half_day_deduction,
            "absent_deduction": self.absent_deduction,
            "total_deduction": self.total_deduction,
            "net_payable_salary": self.net_payable_salary,
            "status": self.status.value,
            "approved_by": self.approved_by,
            "approved_at": to_iso(self.approved_at),
            "rejected_by": self.rejected_by,
            "rejected_at": to_iso(self.rejected_at),
            "paid_at": to_iso(self.paid_at),
            "created_at": to_iso(self.created_at),
            "updated_at": to_iso(self.updated_at),
        }

    def to_view(self, *, preview: bool = False) -> dict[str, Any]:
        return {"id": self.record_id, "preview": preview, **self.to_document()}


@dataclass(frozen=True)
class BulkOutcome:
    """Per-item result of a bulk operation."""

    item_id: str
    status: OutcomeStatus
    record_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "status": self.status.value,
            "record_id": self.record_id,
            "error": self.error,
        }
