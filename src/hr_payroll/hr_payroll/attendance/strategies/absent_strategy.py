from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..policy import OfficeHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Worked less than the half-day threshold: the day counts as absent."""

    def decide_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT)

    def decide_checkout(self, *, worked_hours: float, current: StatusDecision) -> StatusDecision:
        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            is_late=current.is_late,
            note=f"Worked {worked_hours:.1f}h, below half day",
        )
