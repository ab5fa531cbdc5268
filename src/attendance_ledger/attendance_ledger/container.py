from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .attendance.factory import ClassificationStrategyFactory
from .attendance.service import AttendanceService
from .audit.service import AuditTrailService
from .authority.service import RoleAuthorityModel
from .common.datetime_utils import now_local
from .common.locks import KeyedLocks
from .core.constants import DEFAULT_MAX_APPROVAL_RETRIES
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_store import MySQLLedgerStore
from .employees.service import EmployeeService
from .requests.service import RequestApprovalProcessor
from .shifts.model import ShiftPolicy
from .store import LedgerStore


@dataclass(frozen=True)
class Container:
    store: LedgerStore
    policy: ShiftPolicy
    authority: RoleAuthorityModel
    locks: KeyedLocks
    clock: Callable[[], datetime]

    attendance_service: AttendanceService
    request_processor: RequestApprovalProcessor
    employee_service: EmployeeService
    audit_service: AuditTrailService


def build_container(
    *,
    db_config: Optional[dict] = None,
    settings=None,
    store: Optional[LedgerStore] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire the services. Pass `store` to run on something other than MySQL (tests)."""

    if store is None:
        if db_config is None:
            raise ValueError("db_config is required when no store is given")
        store = MySQLLedgerStore(DatabaseConnection.get_instance(DBConfig.from_dict(db_config)))

    policy = ShiftPolicy.from_settings(settings) if settings is not None else ShiftPolicy()
    max_retries = int(getattr(settings, "MAX_APPROVAL_RETRIES", DEFAULT_MAX_APPROVAL_RETRIES))
    authority = RoleAuthorityModel()
    # One lock table shared by every service that writes an employee's data.
    locks = KeyedLocks()

    attendance_service = AttendanceService(
        store,
        policy=policy,
        authority=authority,
        strategy_factory=ClassificationStrategyFactory(),
        locks=locks,
        max_retries=max_retries,
        clock=clock,
    )
    request_processor = RequestApprovalProcessor(store, authority, locks=locks, max_retries=max_retries, clock=clock)
    employee_service = EmployeeService(store, authority, locks=locks, max_retries=max_retries, clock=clock)
    audit_service = AuditTrailService(store, authority)

    return Container(
        store=store,
        policy=policy,
        authority=authority,
        locks=locks,
        clock=clock,
        attendance_service=attendance_service,
        request_processor=request_processor,
        employee_service=employee_service,
        audit_service=audit_service,
    )
