from __future__ import annotations

from datetime import date, datetime

import pytest

from src.hr_payroll.hr_payroll.attendance.aggregator import AttendanceFactAggregator
from src.hr_payroll.hr_payroll.attendance.document_attendance_repository import DocumentAttendanceRepository
from src.hr_payroll.hr_payroll.attendance.policy import DocumentOfficeHoursPolicyProvider
from src.hr_payroll.hr_payroll.attendance.service import AttendanceService
from src.hr_payroll.hr_payroll.core.enums import AttendanceLocation, AttendanceStatus, Role
from src.hr_payroll.hr_payroll.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_payroll.hr_payroll.employees.document_employee_repository import DocumentEmployeeRepository
from src.hr_payroll.hr_payroll.leaves.document_leave_repository import DocumentLeaveRequestRepository
from src.hr_payroll.hr_payroll.payroll.settings import DocumentPayrollSettingsRepository
from src.hr_payroll.hr_payroll.store.memory_store import InMemoryDocumentStore


def _store(policy: dict | None = None) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        seed={
            "employees": {"E1": {"name": "A", "status": "active"}},
            "attendance_policy": {"default_policy": policy or {"office_start_time": "09:00", "grace_period_minutes": 10}},
        }
    )


def _service(policy: dict | None = None, store: InMemoryDocumentStore | None = None):
    if store is None:
        store = _store(policy)
    repo = DocumentAttendanceRepository(store)
    service = AttendanceService(
        repo,
        DocumentEmployeeRepository(store),
        DocumentOfficeHoursPolicyProvider(store),
        DocumentPayrollSettingsRepository(store),
    )
    return service, repo


def test_on_time_checkin_then_full_day_checkout():
    service, repo = _service()
    service.check_in("E1", now=datetime(2025, 3, 3, 9, 5))
    service.check_out("E1", now=datetime(2025, 3, 3, 18, 0))

    rec = repo.get_for_employee_and_date("E1", date(2025, 3, 3))
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.is_late is False
    assert rec.record_id == "E1_2025-03-03"
    assert rec.worked_hours == pytest.approx(8.9167, abs=1e-3)


def test_checkin_after_grace_is_late():
    service, _ = _service()
    rec = service.check_in("E1", now=datetime(2025, 3, 3, 9, 11), location=AttendanceLocation.REMOTE)

    assert rec.status == AttendanceStatus.LATE
    assert rec.is_late is True
    assert rec.location == AttendanceLocation.REMOTE


def test_short_day_becomes_half_day():
    service, _ = _service()
    service.check_in("E1", now=datetime(2025, 3, 3, 9, 0))
    rec = service.check_out("E1", now=datetime(2025, 3, 3, 14, 0))

    assert rec.status == AttendanceStatus.HALF_DAY


def test_duplicate_checkin_and_checkout_rules():
    service, _ = _service()
    with pytest.raises(ValidationError):
        service.check_out("E1", now=datetime(2025, 3, 3, 18, 0))

    service.check_in("E1", now=datetime(2025, 3, 3, 9, 0))
    with pytest.raises(ValidationError):
        service.check_in("E1", now=datetime(2025, 3, 3, 9, 30))

    service.check_out("E1", now=datetime(2025, 3, 3, 18, 0))
    with pytest.raises(ValidationError):
        service.check_out("E1", now=datetime(2025, 3, 3, 19, 0))


def test_unknown_employee_cannot_check_in():
    service, _ = _service()
    with pytest.raises(NotFoundError):
        service.check_in("ghost", now=datetime(2025, 3, 3, 9, 0))


def test_manual_entry_upserts_one_record_per_day():
    service, repo = _service()
    service.check_in("E1", now=datetime(2025, 3, 3, 9, 30))

    service.manual_entry(
        current_role=Role.ADMIN,
        employee_id="E1",
        work_date=date(2025, 3, 3),
        status=AttendanceStatus.PRESENT,
        check_in_time=datetime(2025, 3, 3, 9, 0),
        check_out_time=datetime(2025, 3, 3, 17, 30),
        note="Badge reader fault",
    )

    records = repo.list_for_employee_between("E1", date(2025, 3, 1), date(2025, 3, 31))
    assert len(records) == 1
    assert records[0].is_late is False
    assert records[0].note == "Badge reader fault"


def test_manual_entry_rules():
    service, _ = _service()
    with pytest.raises(AuthorizationError):
        service.manual_entry(
            current_role=Role.EMPLOYEE, employee_id="E1", work_date=date(2025, 3, 3), status=AttendanceStatus.PRESENT
        )
    with pytest.raises(ValidationError):
        service.manual_entry(
            current_role=Role.ADMIN,
            employee_id="E1",
            work_date=date(2025, 3, 3),
            status=AttendanceStatus.PRESENT,
            check_in_time=datetime(2025, 3, 3, 17, 0),
            check_out_time=datetime(2025, 3, 3, 9, 0),
        )


def test_manual_status_must_agree_with_times():
    service, _ = _service()
    day = date(2025, 3, 3)

    def enter(status, check_in=None, check_out=None):
        return service.manual_entry(
            current_role=Role.ADMIN,
            employee_id="E1",
            work_date=day,
            status=status,
            check_in_time=check_in,
            check_out_time=check_out,
        )

    with pytest.raises(ValidationError):
        enter(AttendanceStatus.PRESENT)
    with pytest.raises(ValidationError):
        enter(AttendanceStatus.HALF_DAY)
    with pytest.raises(ValidationError):
        enter(AttendanceStatus.ABSENT, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 18, 0))
    with pytest.raises(ValidationError):
        enter(AttendanceStatus.PRESENT, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 14, 0))
    with pytest.raises(ValidationError):
        enter(AttendanceStatus.HALF_DAY, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 18, 0))
    with pytest.raises(ValidationError):
        enter(AttendanceStatus.HALF_DAY, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 11, 0))

    assert enter(AttendanceStatus.ABSENT).status == AttendanceStatus.ABSENT
    assert enter(AttendanceStatus.HALF_DAY, datetime(2025, 3, 3, 9, 0), datetime(2025, 3, 3, 14, 0)).is_late is False


def test_manual_present_day_is_counted_by_the_aggregator():
    store = _store()
    service, repo = _service(store=store)
    service.manual_entry(
        current_role=Role.ADMIN,
        employee_id="E1",
        work_date=date(2025, 3, 3),
        status=AttendanceStatus.PRESENT,
        check_in_time=datetime(2025, 3, 3, 9, 0),
    )
    aggregator = AttendanceFactAggregator(
        repo,
        DocumentLeaveRequestRepository(store),
        DocumentPayrollSettingsRepository(store),
        DocumentOfficeHoursPolicyProvider(store),
    )

    facts = aggregator.aggregate("E1", 3, 2025)

    assert facts.present_days == 1
    assert facts.absent_days == 29


def test_manual_entry_rejects_offset_timestamps():
    service, repo = _service()
    with pytest.raises(ValidationError):
        service.manual_entry(
            current_role=Role.ADMIN,
            employee_id="E1",
            work_date=date(2025, 3, 3),
            status=AttendanceStatus.PRESENT,
            check_in_time=datetime.fromisoformat("2025-03-03T09:00:00+06:00"),
        )
    assert repo.get_for_employee_and_date("E1", date(2025, 3, 3)) is None


def test_missing_policy_falls_back_to_defaults():
    store = InMemoryDocumentStore(seed={"employees": {"E1": {"name": "A", "status": "active"}}})
    policy = DocumentOfficeHoursPolicyProvider(store).get_policy()

    assert policy.grace_period_minutes == 15
    assert policy.is_late(datetime(2025, 3, 3, 9, 15)) is False
    assert policy.is_late(datetime(2025, 3, 3, 9, 16)) is True
