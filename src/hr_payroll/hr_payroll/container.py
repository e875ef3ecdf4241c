from __future__ import annotations

import logging
from dataclasses import dataclass
from types import ModuleType
from typing import Callable, Optional

from .attendance.aggregator import AttendanceFactAggregator
from .attendance.document_attendance_repository import DocumentAttendanceRepository
from .attendance.factory import AttendanceStrategyFactory
from .attendance.policy import DocumentOfficeHoursPolicyProvider
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_BULK_WORKERS, DEFAULT_CACHE_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .employees.document_employee_repository import DocumentEmployeeRepository
from .employees.service import AccessRevoker, EmployeeService
from .leaves.document_leave_repository import DocumentLeaveRequestRepository
from .leaves.service import LeaveApprovalService
from .payroll.document_payroll_repository import DocumentPayrollRepository
from .payroll.service import PayrollService
from .payroll.settings import DocumentPayrollSettingsRepository
from .store.base import DocumentStore
from .store.cache import CachedDocumentStore
from .store.memory_store import InMemoryDocumentStore
from .store.mysql_store import MySQLDocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    clock: Callable

    employees_repo: DocumentEmployeeRepository
    leaves_repo: DocumentLeaveRequestRepository
    attendance_repo: DocumentAttendanceRepository
    payroll_repo: DocumentPayrollRepository
    settings_repo: DocumentPayrollSettingsRepository
    policy_provider: DocumentOfficeHoursPolicyProvider

    fact_aggregator: AttendanceFactAggregator
    employee_service: EmployeeService
    leave_service: LeaveApprovalService
    attendance_service: AttendanceService
    payroll_service: PayrollService


def build_store(settings: ModuleType) -> DocumentStore:
    backend = str(getattr(settings, "STORE_BACKEND", "mysql")).lower()
    if backend == "memory":
        return InMemoryDocumentStore()
    if backend == "mysql":
        config = DBConfig.from_dict(getattr(settings, "DB_CONFIG"))
        return MySQLDocumentStore(DatabaseConnection.get_instance(config))
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


def build_container(
    settings: ModuleType,
    *,
    store: Optional[DocumentStore] = None,
    clock: Callable = now_local,
    access_revoker: Optional[AccessRevoker] = None,
) -> Container:
    backend = store if store is not None else build_store(settings)
    ttl = float(getattr(settings, "CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS))
    cached = CachedDocumentStore(backend, ttl_seconds=ttl) if ttl > 0 else backend

    employees_repo = DocumentEmployeeRepository(cached)
    leaves_repo = DocumentLeaveRequestRepository(cached)
    attendance_repo = DocumentAttendanceRepository(cached)
    payroll_repo = DocumentPayrollRepository(cached)
    settings_repo = DocumentPayrollSettingsRepository(cached, clock=clock)
    policy_provider = DocumentOfficeHoursPolicyProvider(cached)

    fact_aggregator = AttendanceFactAggregator(attendance_repo, leaves_repo, settings_repo, policy_provider)
    employee_service = EmployeeService(employees_repo, access_revoker=access_revoker, clock=clock)
    leave_service = LeaveApprovalService(leaves_repo, employees_repo, clock=clock)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        policy_provider,
        settings_repo,
        strategy_factory=AttendanceStrategyFactory(),
        clock=clock,
    )
    payroll_service = PayrollService(
        payroll_repo,
        employees_repo,
        fact_aggregator,
        settings_repo,
        clock=clock,
        max_workers=int(getattr(settings, "BULK_WORKERS", DEFAULT_BULK_WORKERS)),
    )

    logger.info("container ready (store=%s, cache_ttl=%ss)", type(backend).__name__, ttl)
    return Container(
        store=cached,
        clock=clock,
        employees_repo=employees_repo,
        leaves_repo=leaves_repo,
        attendance_repo=attendance_repo,
        payroll_repo=payroll_repo,
        settings_repo=settings_repo,
        policy_provider=policy_provider,
        fact_aggregator=fact_aggregator,
        employee_service=employee_service,
        leave_service=leave_service,
        attendance_service=attendance_service,
        payroll_service=payroll_service,
    )
