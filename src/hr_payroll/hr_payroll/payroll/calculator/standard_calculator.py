from __future__ import annotations

import math

from ...common.validators import coerce_number
from ...core.exceptions import ValidationError
from ..model import PayrollRecord
from ..settings import PayrollSettings
from .base import DeductionBreakdown, PayrollCalculator


def _money(value: float) -> float:
    return round(value, 2)


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: day-rate deductions plus adjustments, net not below 0.

    Amounts are kept at full precision and rounded to cents only on output;
    net pay is taken from the rounded total so the two always agree.
    """

    def compute_deductions(self, record: PayrollRecord, settings: PayrollSettings) -> DeductionBreakdown:
        basic = coerce_number(record.basic_salary)
        if basic is None:
            raise ValidationError(f"Basic salary for employee {record.employee_id} is missing or not a number")

        daily_rate = basic / settings.working_days_per_month
        late_penalty_days = math.floor(record.total_late_days / settings.late_tolerance_count)

        late_penalty = late_penalty_days * daily_rate
        unpaid = record.unpaid_leave_days * daily_rate
        half_day = record.total_half_days * 0.5 * daily_rate
        absent = record.total_absent_days * daily_rate

        total = (
            late_penalty
            + unpaid
            + half_day
            + absent
            + record.loan_deduction
            + record.ait
            - record.festival_bonus
            - record.lunch_subsidy
        )
        total_rounded = _money(total)
        return DeductionBreakdown(
            late_penalty_days=late_penalty_days,
            late_penalty=_money(late_penalty),
            unpaid_leave_deduction=_money(unpaid),
            half_day_deduction=_money(half_day),
            absent_deduction=_money(absent),
            total_deduction=total_rounded,
            net_payable=_money(max(0.0, basic - total_rounded)),
        )
