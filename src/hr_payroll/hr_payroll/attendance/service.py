from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import month_bounds, now_local
from ..core.enums import AttendanceLocation, AttendanceStatus, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..payroll.settings import PayrollSettingsProvider
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .policy import OfficeHoursPolicyProvider
from .repository import AttendanceRepository
from .strategies.base import StatusDecision

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        policy: OfficeHoursPolicyProvider,
        settings: PayrollSettingsProvider,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        clock: Callable = now_local,
    ):
        self._attendance = attendance
        self._employees = employees
        self._policy = policy
        self._settings = settings
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._clock = clock

    def _require_employee(self, employee_id: str) -> None:
        if not self._employees.get_by_id(employee_id):
            raise NotFoundError(f"Employee {employee_id} not found")

    def check_in(
        self,
        employee_id: str,
        *,
        now: datetime | None = None,
        location: AttendanceLocation = AttendanceLocation.OFFICE,
    ) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()
        self._require_employee(employee_id)

        existing = self._attendance.get_for_employee_and_date(employee_id, today)
        if existing and existing.check_in_time:
            raise ValidationError("Already checked in today")

        policy = self._policy.get_policy()
        strategy = self._factory.for_checkin(now=now, policy=policy)
        decision = strategy.decide_checkin(now=now, policy=policy)

        record = AttendanceRecord(
            employee_id=str(employee_id),
            work_date=today,
            status=decision.status,
            check_in_time=now,
            location=location,
            is_late=decision.is_late,
            note=decision.note,
        )
        self._attendance.upsert(record)
        logger.info("check-in %s at %s (%s)", employee_id, now.strftime("%H:%M"), decision.status.value)
        return record

    def check_out(self, employee_id: str, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if not record or not record.check_in_time:
            raise ValidationError("You have not checked in today")
        if record.check_out_time is not None:
            raise ValidationError("Already checked out today")
        if now < record.check_in_time:
            raise ValidationError("Check-out cannot be before check-in")

        worked_hours = (now - record.check_in_time).total_seconds() / 3600.0
        current = StatusDecision(status=record.status, is_late=record.is_late, note=record.note)
        strategy = self._factory.for_checkout(worked_hours=worked_hours, settings=self._settings.load())
        decision = strategy.decide_checkout(worked_hours=worked_hours, current=current)

        updated = AttendanceRecord(
            employee_id=record.employee_id,
            work_date=record.work_date,
            status=decision.status,
            check_in_time=record.check_in_time,
            check_out_time=now,
            location=record.location,
            is_late=decision.is_late,
            note=decision.note or record.note,
        )
        self._attendance.upsert(updated)
        logger.info("check-out %s after %.1fh (%s)", employee_id, worked_hours, decision.status.value)
        return updated

    def manual_entry(
        self,
        *,
        current_role: Role,
        employee_id: str,
        work_date: date,
        status: AttendanceStatus,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        location: AttendanceLocation = AttendanceLocation.OFFICE,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Admin creates or replaces the record for one employee and date."""

        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can enter attendance manually")
        self._require_employee(employee_id)
        for stamp in (check_in_time, check_out_time):
            if stamp and stamp.tzinfo is not None:
                raise ValidationError("Check-in/check-out must be local times without a UTC offset")
            if stamp and stamp.date() != work_date:
                raise ValidationError("Check-in/check-out must fall on the attendance date")
        if check_out_time and not check_in_time:
            raise ValidationError("Check-out requires a check-in time")
        if check_in_time and check_out_time and check_out_time < check_in_time:
            raise ValidationError("Check-out cannot be before check-in")
        self._check_manual_status(status, check_in_time, check_out_time)

        is_late = bool(check_in_time) and self._policy.get_policy().is_late(check_in_time)
        record = AttendanceRecord(
            employee_id=str(employee_id),
            work_date=work_date,
            status=status,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            location=location,
            is_late=is_late,
            note=(note or "").strip() or None,
        )
        self._attendance.upsert(record)
        logger.info("manual attendance %s for %s: %s", record.record_id, employee_id, status.value)
        return record

    def _check_manual_status(
        self,
        status: AttendanceStatus,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
    ) -> None:
        # status must agree with what classify_day derives from the times
        if status == AttendanceStatus.ABSENT:
            if check_in_time:
                raise ValidationError("An absent day cannot have check-in/check-out times")
            return
        if not check_in_time:
            raise ValidationError(f"Status {status.value} requires a check-in time")
        if not check_out_time:
            return

        settings = self._settings.load()
        worked_hours = (check_out_time - check_in_time).total_seconds() / 3600.0
        if worked_hours < settings.half_day_hours:
            raise ValidationError(
                f"Worked {worked_hours:.1f}h is below half day; record the day as absent without times"
            )
        if status == AttendanceStatus.HALF_DAY and worked_hours >= settings.full_day_hours:
            raise ValidationError(f"Worked {worked_hours:.1f}h is a full day, not half_day")
        if status != AttendanceStatus.HALF_DAY and worked_hours < settings.full_day_hours:
            raise ValidationError(f"Worked {worked_hours:.1f}h is short of a full day; use half_day")

    def get_for_day(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, work_date)

    def list_month(self, employee_id: str, month: int, year: int) -> Sequence[AttendanceRecord]:
        first, last = month_bounds(month, year)
        return self._attendance.list_for_employee_between(employee_id, first, last)
