from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..policy import OfficeHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class HalfDayStrategy(AttendanceStrategy):
    """Check-out after at least half a day but short of a full day."""

    def decide_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, worked_hours: float, current: StatusDecision) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.HALF_DAY,
            is_late=current.is_late,
            note=f"Worked {worked_hours:.1f}h",
        )
