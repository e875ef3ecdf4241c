import pytest

from src.hr_payroll.hr_payroll.core.exceptions import ValidationError
from src.hr_payroll.hr_payroll.payroll.calculator.standard_calculator import StandardPayrollCalculator
from src.hr_payroll.hr_payroll.payroll.model import PayrollRecord
from src.hr_payroll.hr_payroll.payroll.settings import PayrollSettings

SETTINGS = PayrollSettings(working_days_per_month=30, late_tolerance_count=3)


def _record(**overrides) -> PayrollRecord:
    data = dict(employee_id="E1", month=3, year=2025, basic_salary=30000)
    data.update(overrides)
    return PayrollRecord(**data)


def test_late_penalty_counts_whole_tolerance_blocks():
    breakdown = StandardPayrollCalculator().compute_deductions(_record(total_late_days=7), SETTINGS)

    assert breakdown.late_penalty_days == 2
    assert breakdown.late_penalty == 2000


def test_total_deduction_with_adjustments():
    record = _record(
        total_late_days=7,
        unpaid_leave_days=2,
        loan_deduction=500,
        ait=300,
        festival_bonus=1000,
        lunch_subsidy=200,
    )
    breakdown = StandardPayrollCalculator().compute_deductions(record, SETTINGS)

    assert breakdown.unpaid_leave_deduction == 2000
    assert breakdown.total_deduction == 3600
    assert breakdown.net_payable == 26400


def test_half_day_and_absent_deductions():
    breakdown = StandardPayrollCalculator().compute_deductions(
        _record(total_half_days=3, total_absent_days=2), SETTINGS
    )

    assert breakdown.half_day_deduction == 1500
    assert breakdown.absent_deduction == 2000
    assert breakdown.total_deduction == 3500


def test_net_is_never_negative():
    breakdown = StandardPayrollCalculator().compute_deductions(_record(total_absent_days=40), SETTINGS)
    assert breakdown.net_payable == 0


def test_bonus_can_make_total_negative_and_raise_net():
    breakdown = StandardPayrollCalculator().compute_deductions(_record(festival_bonus=5000), SETTINGS)

    assert breakdown.total_deduction == -5000
    assert breakdown.net_payable == 35000


def test_rounding_happens_on_output_only():
    breakdown = StandardPayrollCalculator().compute_deductions(
        _record(basic_salary=10000, total_late_days=3, total_absent_days=1, unpaid_leave_days=1), SETTINGS
    )

    assert breakdown.late_penalty == 333.33
    assert breakdown.absent_deduction == 333.33
    assert breakdown.unpaid_leave_deduction == 333.33
    assert breakdown.total_deduction == 1000
    assert breakdown.net_payable == 9000


@pytest.mark.parametrize("salary", [None, "abc", float("nan")])
def test_missing_or_malformed_salary_is_rejected(salary):
    with pytest.raises(ValidationError):
        StandardPayrollCalculator().compute_deductions(_record(basic_salary=salary), SETTINGS)
