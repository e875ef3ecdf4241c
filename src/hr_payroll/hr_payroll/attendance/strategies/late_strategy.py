from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..policy import OfficeHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the grace period."""

    def decide_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> StatusDecision:
        minutes_late = int((now - policy.grace_deadline(now.date())).total_seconds() // 60)
        return StatusDecision(
            status=AttendanceStatus.LATE,
            is_late=True,
            note=f"Late by {minutes_late} min after grace period",
        )

    def decide_checkout(self, *, worked_hours: float, current: StatusDecision) -> StatusDecision:
        return current
