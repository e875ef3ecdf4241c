from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..policy import OfficeHoursPolicy
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in, full-day check-out."""

    def decide_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)

    def decide_checkout(self, *, worked_hours: float, current: StatusDecision) -> StatusDecision:
        return current
