from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..audit.mysql_audit_repository import MySQLAuditRepository
from ..employees.mysql_employee_repository import MySQLEmployeeRepository
from ..requests.mysql_request_repository import MySQLRequestRepository
from ..store import LedgerStore
from .connection import DatabaseConnection
from .mysql_base import TransactionScope


@dataclass(frozen=True)
class MySQLStoreSession:
    employees: MySQLEmployeeRepository
    attendance: MySQLAttendanceRepository
    requests: MySQLRequestRepository
    audit: MySQLAuditRepository


class MySQLLedgerStore(LedgerStore):
    """LedgerStore backed by mysql-connector; one connection and transaction per atomic block."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def atomic(self) -> Iterator[MySQLStoreSession]:
        with TransactionScope(self._conn_factory) as scope:
            yield MySQLStoreSession(
                employees=MySQLEmployeeRepository(scope),
                attendance=MySQLAttendanceRepository(scope),
                requests=MySQLRequestRepository(scope),
                audit=MySQLAuditRepository(scope),
            )
