"""Transactional record store consumed by the services.

Every read-modify-write runs inside `store.atomic()`: repositories on the
yielded session share one transaction, which commits when the block exits
normally and rolls back when it raises. Writes are version-checked, so two
processes racing on the same employee surface ConcurrentModification instead
of silently overwriting each other.
"""

from __future__ import annotations

from typing import ContextManager, Protocol

from .attendance.repository import AttendanceRepository
from .audit.repository import AuditRepository
from .employees.repository import EmployeeRepository
from .requests.repository import RequestRepository


class StoreSession(Protocol):
    employees: EmployeeRepository
    attendance: AttendanceRepository
    requests: RequestRepository
    audit: AuditRepository


class LedgerStore(Protocol):
    def atomic(self) -> ContextManager[StoreSession]:
        raise NotImplementedError
