from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.attendance_ledger.attendance_ledger.container import build_container
from src.attendance_ledger.attendance_ledger.core.enums import EmployeeStatus, RequestStatus, Role
from src.attendance_ledger.attendance_ledger.core.exceptions import ConcurrentModification
from src.attendance_ledger.attendance_ledger.employees.model import Employee


class InMemoryEmployees:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self._store.employees.get(employee_id)

    def list_active(self):
        return [e for _, e in sorted(self._store.employees.items()) if e.is_active]

    def save(self, employee: Employee) -> Employee:
        if self._store.employee_conflicts > 0:
            self._store.employee_conflicts -= 1
            raise ConcurrentModification("injected conflict")
        current = self._store.employees.get(employee.employee_id)
        if current is None or current.version != employee.version:
            raise ConcurrentModification(f"Employee {employee.employee_id} was modified concurrently")
        saved = employee.with_changes(version=employee.version + 1)
        self._store.employees[employee.employee_id] = saved
        return saved


class InMemoryAttendance:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def get_for_employee_and_date(self, employee_id: str, work_date: date):
        return self._store.records.get((employee_id, work_date))

    def list_for_employee(self, employee_id: str, *, start_date: date, end_date: date):
        items = [r for (eid, d), r in self._store.records.items() if eid == employee_id and start_date <= d <= end_date]
        return sorted(items, key=lambda r: r.work_date)

    def get_recent_for_employee(self, employee_id: str, limit: int):
        items = [r for (eid, _), r in self._store.records.items() if eid == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def save(self, record):
        key = (record.employee_id, record.work_date)
        current = self._store.records.get(key)
        if record.version == 0:
            if current is not None:
                raise ConcurrentModification("record already exists")
        elif current is None or current.version != record.version:
            raise ConcurrentModification("record modified concurrently")
        saved = record.with_changes(version=record.version + 1)
        self._store.records[key] = saved
        return saved


class InMemoryRequests:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def get(self, request_id: str):
        return self._store.requests.get(request_id)

    def create(self, request):
        self._store.requests[request.request_id] = request
        return request

    def save(self, request, *, expected_status: RequestStatus):
        current = self._store.requests.get(request.request_id)
        if current is None or current.status != expected_status:
            raise ConcurrentModification("request status changed")
        self._store.requests[request.request_id] = request
        return request

    def list_requests(self, *, employee_id=None, status=None, limit: int = 200):
        items = list(self._store.requests.values())
        if employee_id is not None:
            items = [r for r in items if r.employee_id == employee_id]
        if status is not None:
            items = [r for r in items if r.status == status]
        items.reverse()
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items[:limit]

    def find_covering(self, employee_id: str, work_date: date, *, request_type, status):
        return [
            r
            for r in self._store.requests.values()
            if r.employee_id == employee_id and r.request_type == request_type and r.status == status and r.covers(work_date)
        ]


class InMemoryAudit:
    def __init__(self, store: "InMemoryStore"):
        self._store = store

    def append(self, entry) -> None:
        self._store.audit.append(entry)

    def list_entries(self, *, actor_id=None, action=None, entity_id=None, since=None, until=None, limit=100, offset=0):
        items = [
            e
            for e in reversed(self._store.audit)
            if (actor_id is None or e.actor_id == actor_id)
            and (action is None or e.action == action)
            and (entity_id is None or e.entity_id == entity_id)
            and (since is None or e.created_at >= since)
            and (until is None or e.created_at <= until)
        ]
        return items[offset : offset + limit]


class InMemorySession:
    def __init__(self, store: "InMemoryStore"):
        self.employees = InMemoryEmployees(store)
        self.attendance = InMemoryAttendance(store)
        self.requests = InMemoryRequests(store)
        self.audit = InMemoryAudit(store)


class InMemoryStore:
    """LedgerStore fake: an atomic block that raises restores the previous state."""

    def __init__(self):
        self.employees = {}
        self.records = {}
        self.requests = {}
        self.audit = []
        self.employee_conflicts = 0

    @contextmanager
    def atomic(self):
        snapshot = (dict(self.employees), dict(self.records), dict(self.requests), list(self.audit))
        try:
            yield InMemorySession(self)
        except Exception:
            self.employees, self.records, self.requests, self.audit = snapshot
            raise

    def add_employee(self, employee_id: str, role: Role = Role.EMPLOYEE, **changes) -> Employee:
        fields = dict(
            employee_id=employee_id,
            name=employee_id.title(),
            role=role,
            allowed_absence_days=20,
            total_absence_days=0,
            allowed_late_early_hours=Decimal("8.00"),
            used_late_early_hours=Decimal("0.00"),
            status=EmployeeStatus.ACTIVE,
            version=1,
        )
        fields.update(changes)
        employee = Employee(**fields)
        self.employees[employee_id] = employee
        return employee


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int = 0, *, day: Optional[date] = None) -> datetime:
        day = day or self.now.date()
        self.now = datetime(day.year, day.month, day.day, hour, minute)
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


# Monday
WORK_DAY = date(2025, 3, 3)


@pytest.fixture
def store():
    s = InMemoryStore()
    s.add_employee("admin", Role.ADMIN)
    s.add_employee("manager", Role.MANAGER)
    s.add_employee("manager2", Role.MANAGER)
    s.add_employee("emp", Role.EMPLOYEE)
    s.add_employee("emp2", Role.EMPLOYEE)
    return s


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 3, 7, 0))


@pytest.fixture
def container(store, clock):
    return build_container(store=store, clock=clock)
