from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ..policy import OfficeHoursPolicy


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    is_late: bool = False
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide_checkin(self, *, now: datetime, policy: OfficeHoursPolicy) -> StatusDecision:
        raise NotImplementedError

    @abstractmethod
    def decide_checkout(self, *, worked_hours: float, current: StatusDecision) -> StatusDecision:
        raise NotImplementedError
