from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..payroll.settings import PayrollSettings
from .policy import OfficeHoursPolicy
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.half_day_strategy import HalfDayStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> AttendanceStrategy:
        if policy.is_late(now):
            return LateStrategy()
        return NormalStrategy()

    def for_checkout(self, *, worked_hours: float, settings: PayrollSettings) -> AttendanceStrategy:
        if worked_hours >= settings.full_day_hours:
            return NormalStrategy()
        if worked_hours >= settings.half_day_hours:
            return HalfDayStrategy()
        return AbsentStrategy()
