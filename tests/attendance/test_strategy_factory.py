from datetime import datetime, time

from src.hr_payroll.hr_payroll.attendance.factory import AttendanceStrategyFactory
from src.hr_payroll.hr_payroll.attendance.policy import OfficeHoursPolicy
from src.hr_payroll.hr_payroll.attendance.strategies.absent_strategy import AbsentStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.base import StatusDecision
from src.hr_payroll.hr_payroll.attendance.strategies.half_day_strategy import HalfDayStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.late_strategy import LateStrategy
from src.hr_payroll.hr_payroll.attendance.strategies.normal_strategy import NormalStrategy
from src.hr_payroll.hr_payroll.core.enums import AttendanceStatus
from src.hr_payroll.hr_payroll.payroll.settings import PayrollSettings

POLICY = OfficeHoursPolicy(office_start=time(9, 0), office_end=time(18, 0), grace_period_minutes=15)


def test_factory_checkin_on_time_within_grace():
    now = datetime(2025, 1, 2, 9, 15, 0)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, policy=POLICY)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=now, policy=POLICY).status == AttendanceStatus.PRESENT


def test_factory_checkin_late_after_grace():
    now = datetime(2025, 1, 2, 9, 45, 0)
    strategy = AttendanceStrategyFactory().for_checkin(now=now, policy=POLICY)
    decision = strategy.decide_checkin(now=now, policy=POLICY)

    assert isinstance(strategy, LateStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.is_late is True
    assert "30 min" in decision.note


def test_factory_checkout_by_worked_hours():
    factory = AttendanceStrategyFactory()
    settings = PayrollSettings(half_day_hours=4, full_day_hours=8)

    assert isinstance(factory.for_checkout(worked_hours=8.0, settings=settings), NormalStrategy)
    assert isinstance(factory.for_checkout(worked_hours=5.5, settings=settings), HalfDayStrategy)
    assert isinstance(factory.for_checkout(worked_hours=4.0, settings=settings), HalfDayStrategy)
    assert isinstance(factory.for_checkout(worked_hours=3.9, settings=settings), AbsentStrategy)


def test_half_day_checkout_keeps_lateness():
    current = StatusDecision(status=AttendanceStatus.LATE, is_late=True)
    decision = HalfDayStrategy().decide_checkout(worked_hours=5, current=current)

    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.is_late is True
