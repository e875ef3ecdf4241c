from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..model import PayrollRecord
from ..settings import PayrollSettings


@dataclass(frozen=True)
class DeductionBreakdown:
    late_penalty_days: int
    late_penalty: float
    unpaid_leave_deduction: float
    half_day_deduction: float
    absent_deduction: float
    total_deduction: float
    net_payable: float


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def compute_deductions(self, record: PayrollRecord, settings: PayrollSettings) -> DeductionBreakdown:
        raise NotImplementedError
