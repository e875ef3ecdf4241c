"""Monthly attendance and leave facts feeding payroll.

Everything here is read-only: the same inputs always give the same facts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterator, Optional, Sequence

from ..common.datetime_utils import iter_days, month_bounds
from ..core.enums import AttendanceStatus, LeaveType
from ..leaves.model import LeaveRequest, leave_weight
from ..leaves.repository import LeaveRequestRepository
from ..payroll.settings import PayrollSettings, PayrollSettingsProvider
from .model import AttendanceRecord
from .policy import OfficeHoursPolicy, OfficeHoursPolicyProvider
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_CASUAL = "casual"
_SICK = "sick"
_UNPAID = "unpaid"

_POOL_BY_TYPE = {
    LeaveType.CASUAL: _CASUAL,
    LeaveType.HALF_DAY: _CASUAL,
    LeaveType.SICK: _SICK,
}


@dataclass(frozen=True)
class AttendanceFacts:
    present_days: int = 0
    absent_days: float = 0
    late_days: int = 0
    half_days: int = 0
    casual_leave_days: float = 0
    sick_leave_days: float = 0
    unpaid_leave_days: float = 0


@dataclass(frozen=True)
class LeaveBalance:
    employee_id: str
    year: int
    casual_total: int
    casual_used: float
    sick_total: int
    sick_used: float
    unpaid_days: float

    @property
    def casual_remaining(self) -> float:
        return max(self.casual_total - self.casual_used, 0)

    @property
    def sick_remaining(self) -> float:
        return max(self.sick_total - self.sick_used, 0)

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "year": self.year,
            "casual_total": self.casual_total,
            "casual_used": self.casual_used,
            "casual_remaining": self.casual_remaining,
            "sick_total": self.sick_total,
            "sick_used": self.sick_used,
            "sick_remaining": self.sick_remaining,
            "unpaid_days": self.unpaid_days,
        }


def classify_day(
    record: AttendanceRecord,
    settings: PayrollSettings,
    policy: OfficeHoursPolicy,
) -> tuple[Optional[AttendanceStatus], bool]:
    """Return (counted status, late) for one daily record.

    The counted status is PRESENT, HALF_DAY or None (not worked). Lateness
    is re-derived from the check-in time and only counts on present days.
    """

    if record.check_in_time is None:
        return None, False

    worked = record.worked_hours
    if worked is not None:
        if worked >= settings.full_day_hours:
            status = AttendanceStatus.PRESENT
        elif worked >= settings.half_day_hours:
            status = AttendanceStatus.HALF_DAY
        else:
            status = None
    elif record.status in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        status = AttendanceStatus.PRESENT
    elif record.status == AttendanceStatus.HALF_DAY:
        status = AttendanceStatus.HALF_DAY
    else:
        status = None

    late = status == AttendanceStatus.PRESENT and policy.is_late(record.check_in_time)
    return status, late


def walk_leave_days(
    requests: Sequence[LeaveRequest],
    *,
    start: date,
    end: date,
    settings: PayrollSettings,
) -> Iterator[tuple[date, str, float]]:
    """Yield ``(day, pool, amount)`` for each approved leave day in ``[start, end]``.

    Requests are consumed oldest first; a day that would overdraw its
    annual pool spills over into unpaid leave.
    """

    remaining = {_CASUAL: float(settings.annual_casual_leave), _SICK: float(settings.annual_sick_leave)}
    for request in sorted(requests, key=lambda r: (r.start_date, r.created_at)):
        weight = leave_weight(request.leave_type)
        pool = _POOL_BY_TYPE.get(request.leave_type)
        for day in iter_days(max(request.start_date, start), min(request.end_date, end)):
            if pool is None:
                yield day, _UNPAID, weight
                continue
            covered = min(weight, remaining[pool])
            remaining[pool] -= covered
            if covered > 0:
                yield day, pool, covered
            if weight - covered > 0:
                yield day, _UNPAID, weight - covered


class AttendanceFactAggregator:
    def __init__(
        self,
        attendance: AttendanceRepository,
        leaves: LeaveRequestRepository,
        settings: PayrollSettingsProvider,
        policy: OfficeHoursPolicyProvider,
    ):
        self._attendance = attendance
        self._leaves = leaves
        self._settings = settings
        self._policy = policy

    def aggregate(
        self,
        employee_id: str,
        month: int,
        year: int,
        settings: Optional[PayrollSettings] = None,
    ) -> AttendanceFacts:
        settings = settings or self._settings.load()
        policy = self._policy.get_policy()
        first, last = month_bounds(month, year)

        present = late = half = 0
        for record in self._attendance.list_for_employee_between(employee_id, first, last):
            status, is_late = classify_day(record, settings, policy)
            if status == AttendanceStatus.PRESENT:
                present += 1
                if is_late:
                    late += 1
            elif status == AttendanceStatus.HALF_DAY:
                half += 1

        used = {_CASUAL: 0.0, _SICK: 0.0, _UNPAID: 0.0}
        year_start = date(int(year), 1, 1)
        approved = self._leaves.list_approved_overlapping(employee_id, year_start, last)
        for day, pool, amount in walk_leave_days(approved, start=year_start, end=last, settings=settings):
            if day >= first:
                used[pool] += amount

        absent = max(
            0,
            settings.working_days_per_month - present - half - used[_CASUAL] - used[_SICK] - used[_UNPAID],
        )
        facts = AttendanceFacts(
            present_days=present,
            absent_days=absent,
            late_days=late,
            half_days=half,
            casual_leave_days=used[_CASUAL],
            sick_leave_days=used[_SICK],
            unpaid_leave_days=used[_UNPAID],
        )
        logger.debug("attendance facts for %s %02d/%s: %s", employee_id, int(month), year, facts)
        return facts

    def leave_balance(self, employee_id: str, year: int, settings: Optional[PayrollSettings] = None) -> LeaveBalance:
        settings = settings or self._settings.load()
        start, end = date(int(year), 1, 1), date(int(year), 12, 31)
        approved = self._leaves.list_approved_overlapping(employee_id, start, end)

        used = {_CASUAL: 0.0, _SICK: 0.0, _UNPAID: 0.0}
        for _day, pool, amount in walk_leave_days(approved, start=start, end=end, settings=settings):
            used[pool] += amount

        return LeaveBalance(
            employee_id=str(employee_id),
            year=int(year),
            casual_total=settings.annual_casual_leave,
            casual_used=used[_CASUAL],
            sick_total=settings.annual_sick_leave,
            sick_used=used[_SICK],
            unpaid_days=used[_UNPAID],
        )
