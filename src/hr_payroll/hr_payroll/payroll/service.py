from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from typing import Any, Callable, Iterable, Optional, Sequence

from ..attendance.aggregator import AttendanceFactAggregator
from ..common.datetime_utils import month_bounds, now_local
from ..common.validators import require_amount
from ..core.constants import DEFAULT_BULK_WORKERS
from ..core.enums import OutcomeStatus, PayrollAction, PayrollStatus, Role
from ..core.exceptions import (
    AlreadyExistsError,
    AuthorizationError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import EDITABLE_FIELDS, BulkOutcome, PayrollRecord, payroll_record_id
from .repository import PayrollRepository
from .settings import PayrollSettings, PayrollSettingsStore

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "employee_id",
    "employee_name",
    "month",
    "year",
    "basic_salary",
    "total_present_days",
    "total_absent_days",
    "total_late_days",
    "total_half_days",
    "casual_leave_taken",
    "sick_leave_taken",
    "unpaid_leave_days",
    "late_penalty_days",
    "late_penalty",
    "unpaid_leave_deduction",
    "half_day_deduction",
    "absent_deduction",
    "festival_bonus",
    "loan_deduction",
    "lunch_subsidy",
    "ait",
    "total_deduction",
    "net_payable_salary",
    "status",
]


class PayrollService:
    """Use case: monthly payroll records from generation to payment.

    Bulk operations fan out one task per item over a thread pool. Each item
    succeeds or fails on its own and is reported as a ``BulkOutcome``.
    """

    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        aggregator: AttendanceFactAggregator,
        settings: PayrollSettingsStore,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable = now_local,
        max_workers: int = DEFAULT_BULK_WORKERS,
    ):
        self._payroll = payroll
        self._employees = employees
        self._aggregator = aggregator
        self._settings = settings
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock
        self._max_workers = max(1, int(max_workers))

    @staticmethod
    def _require_admin(current_role: Role, action: str) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError(f"Only admins can {action}")

    def _recompute(self, record: PayrollRecord, settings: PayrollSettings) -> PayrollRecord:
        return record.with_breakdown(self._calculator.compute_deductions(record, settings))

    def _build(self, employee: Employee, month: int, year: int, settings: PayrollSettings) -> PayrollRecord:
        facts = self._aggregator.aggregate(employee.employee_id, month, year, settings)
        now = self._clock()
        record = PayrollRecord(
            employee_id=employee.employee_id,
            employee_name=employee.name,
            month=int(month),
            year=int(year),
            basic_salary=employee.salary,
            total_present_days=facts.present_days,
            total_absent_days=facts.absent_days,
            total_late_days=facts.late_days,
            total_half_days=facts.half_days,
            casual_leave_taken=facts.casual_leave_days,
            sick_leave_taken=facts.sick_leave_days,
            unpaid_leave_days=facts.unpaid_leave_days,
            created_at=now,
            updated_at=now,
        )
        return self._recompute(record, settings)

    def _run_bulk(self, items: Iterable[str], task: Callable[[str], BulkOutcome], label: str) -> list[BulkOutcome]:
        items = list(dict.fromkeys(str(i) for i in items))
        outcomes: list[BulkOutcome] = []
        if not items:
            return outcomes

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(items))) as pool:
            futures = {pool.submit(task, item): item for item in items}
            for future in as_completed(futures):
                item = futures[future]
                try:
                    outcomes.append(future.result())
                except DomainError as exc:
                    logger.warning("%s failed for %s: %s", label, item, exc)
                    outcomes.append(BulkOutcome(item_id=item, status=OutcomeStatus.FAILED, error=str(exc)))
                except Exception as exc:
                    logger.error("%s crashed for %s", label, item, exc_info=True)
                    outcomes.append(
                        BulkOutcome(item_id=item, status=OutcomeStatus.FAILED, error=f"Unexpected error: {exc}")
                    )

        outcomes.sort(key=lambda o: o.item_id)
        counts = Counter(o.status.value for o in outcomes)
        logger.info("%s: %s", label, ", ".join(f"{k}={v}" for k, v in sorted(counts.items())))
        return outcomes

    def generate(self, *, current_role: Role, month: int, year: int) -> list[BulkOutcome]:
        """Create missing records for every active employee. Existing records are left alone."""

        self._require_admin(current_role, "generate payroll")
        month_bounds(month, year)
        settings = self._settings.load()
        employees = {e.employee_id: e for e in self._employees.list_active()}

        def generate_one(employee_id: str) -> BulkOutcome:
            record_id = payroll_record_id(employee_id, month, year)
            if self._payroll.get_by_id(record_id):
                return BulkOutcome(item_id=employee_id, status=OutcomeStatus.SKIPPED, record_id=record_id)
            record = self._build(employees[employee_id], month, year, settings)
            try:
                self._payroll.create(record)
            except AlreadyExistsError:
                return BulkOutcome(item_id=employee_id, status=OutcomeStatus.SKIPPED, record_id=record_id)
            return BulkOutcome(item_id=employee_id, status=OutcomeStatus.CREATED, record_id=record_id)

        return self._run_bulk(employees, generate_one, f"payroll generation {int(month):02d}/{year}")

    def preview(self, month: int, year: int) -> list[dict[str, Any]]:
        """Stored records plus unsaved rows for active employees without one."""

        month_bounds(month, year)
        settings = self._settings.load()
        existing = {r.employee_id: r for r in self._payroll.list_for_period(month, year)}
        rows = [r.to_view() for r in existing.values()]

        for employee in self._employees.list_active():
            if employee.employee_id in existing:
                continue
            try:
                rows.append(self._build(employee, month, year, settings).to_view(preview=True))
            except ValidationError as exc:
                logger.warning("no payroll preview for %s: %s", employee.employee_id, exc)

        rows.sort(key=lambda r: r["employee_id"])
        return rows

    def get_record(self, record_id: str) -> PayrollRecord:
        record = self._payroll.get_by_id(record_id)
        if not record:
            raise NotFoundError(f"Payroll record {record_id} not found")
        return record

    def update_field(
        self,
        *,
        current_role: Role,
        field: str,
        value: Any,
        record_id: Optional[str] = None,
        employee_id: Optional[str] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> PayrollRecord:
        """Edit one adjustment and recompute totals.

        Addressed by ``record_id`` or by the period key; with the period key a
        missing record is generated first.
        """

        self._require_admin(current_role, "edit payroll")
        if field not in EDITABLE_FIELDS:
            raise ValidationError(f"Field {field!r} is not editable; expected one of {', '.join(EDITABLE_FIELDS)}")
        amount = require_amount(value, field)

        has_key = employee_id is not None and month is not None and year is not None
        if not record_id and not has_key:
            raise ValidationError("Provide a record id or employee_id, month and year")
        if has_key:
            month_bounds(month, year)
        target_id = record_id or payroll_record_id(employee_id, month, year)

        settings = self._settings.load()
        record = self._payroll.get_by_id(target_id)
        created = False
        if record is None:
            if not has_key:
                raise NotFoundError(f"Payroll record {target_id} not found")
            employee = self._employees.get_by_id(employee_id)
            if not employee:
                raise NotFoundError(f"Employee {employee_id} not found")
            record = self._build(employee, month, year, settings)
            created = True

        if record.status == PayrollStatus.PAID:
            raise InvalidTransitionError(f"Payroll record {target_id} is paid and can no longer be edited")

        updated = self._recompute(replace(record, **{field: amount}, updated_at=self._clock()), settings)
        if created:
            self._payroll.create(updated)
        else:
            self._payroll.save(updated)
        logger.info("payroll %s %s=%s, net %.2f", updated.record_id, field, amount, updated.net_payable_salary)
        return updated

    def bulk_decide(
        self,
        *,
        current_role: Role,
        record_ids: Sequence[str],
        action: PayrollAction,
        approver_id: str,
    ) -> list[BulkOutcome]:
        """Approve or reject records independently. Amounts are kept either way."""

        self._require_admin(current_role, "approve payroll")
        if not record_ids:
            raise ValidationError("No payroll records selected")
        target = PayrollStatus.APPROVED if action == PayrollAction.APPROVE else PayrollStatus.REJECTED

        def decide_one(record_id: str) -> BulkOutcome:
            record = self.get_record(record_id)
            if record.status == PayrollStatus.PAID:
                raise InvalidTransitionError(f"Payroll record {record_id} is already paid")
            if record.status == target:
                return BulkOutcome(item_id=record_id, status=OutcomeStatus.SKIPPED, record_id=record_id)

            now = self._clock()
            if target == PayrollStatus.APPROVED:
                updated = replace(record, status=target, approved_by=str(approver_id), approved_at=now, updated_at=now)
            else:
                updated = replace(record, status=target, rejected_by=str(approver_id), rejected_at=now, updated_at=now)
            self._payroll.save(updated)
            return BulkOutcome(item_id=record_id, status=OutcomeStatus.UPDATED, record_id=record_id)

        return self._run_bulk(record_ids, decide_one, f"payroll {action.value}")

    def mark_paid(self, *, current_role: Role, record_ids: Sequence[str]) -> list[BulkOutcome]:
        self._require_admin(current_role, "mark payroll as paid")
        if not record_ids:
            raise ValidationError("No payroll records selected")

        def pay_one(record_id: str) -> BulkOutcome:
            record = self.get_record(record_id)
            if record.status == PayrollStatus.PAID:
                return BulkOutcome(item_id=record_id, status=OutcomeStatus.SKIPPED, record_id=record_id)
            if record.status != PayrollStatus.APPROVED:
                raise InvalidTransitionError(f"Payroll record {record_id} is {record.status.value}, not approved")
            now = self._clock()
            self._payroll.save(replace(record, status=PayrollStatus.PAID, paid_at=now, updated_at=now))
            return BulkOutcome(item_id=record_id, status=OutcomeStatus.UPDATED, record_id=record_id)

        return self._run_bulk(record_ids, pay_one, "payroll payment")

    def export_rows(self, month: int, year: int) -> list[dict[str, Any]]:
        month_bounds(month, year)
        rows = []
        for record in self._payroll.list_for_period(month, year):
            doc = record.to_document()
            rows.append({column: doc.get(column) for column in EXPORT_COLUMNS})
        return rows

    def get_settings(self) -> PayrollSettings:
        return self._settings.load()

    def update_settings(self, *, current_role: Role, values: dict[str, Any]) -> PayrollSettings:
        self._require_admin(current_role, "change payroll settings")
        return self._settings.update(values)
