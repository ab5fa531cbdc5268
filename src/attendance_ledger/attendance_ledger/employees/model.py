from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import FrozenSet, Optional

from ..core.enums import EmployeeStatus, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee together with their ledger counters.

    `authorities` is None when the employee uses their role's default set.
    `version` is bumped on every persisted change (optimistic concurrency).
    """

    employee_id: str
    name: str
    role: Role
    allowed_absence_days: int
    total_absence_days: int
    allowed_late_early_hours: Decimal
    used_late_early_hours: Decimal
    authorities: Optional[FrozenSet[str]] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    email: Optional[str] = None
    version: int = 0

    @property
    def role_level(self) -> int:
        return self.role.level

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE

    @property
    def remaining_absence_days(self) -> int:
        return self.allowed_absence_days - self.total_absence_days

    @property
    def remaining_late_early_hours(self) -> Decimal:
        return self.allowed_late_early_hours - self.used_late_early_hours

    def with_changes(self, **changes) -> "Employee":
        return replace(self, **changes)

    def to_record(self) -> dict:
        """JSON shape consumed by the export/report tooling."""

        return {
            "id": self.employee_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "roleLevel": self.role_level,
            "authorities": sorted(self.authorities) if self.authorities is not None else None,
            "status": self.status.value,
            "allowedAbsenceDays": self.allowed_absence_days,
            "totalAbsenceDays": self.total_absence_days,
            "remainingAbsenceDays": self.remaining_absence_days,
            "totalLateEarlyHours": float(self.allowed_late_early_hours),
            "usedLateEarlyHours": float(self.used_late_early_hours),
            "remainingLateEarlyHours": float(self.remaining_late_early_hours),
        }


@dataclass(frozen=True)
class BalanceSnapshot:
    """Read-model returned by get_balance_snapshot."""

    employee_id: str
    allowed_absence_days: int
    total_absence_days: int
    remaining_absence_days: int
    allowed_late_early_hours: Decimal
    used_late_early_hours: Decimal
    remaining_late_early_hours: Decimal

    @classmethod
    def of(cls, employee: Employee) -> "BalanceSnapshot":
        return cls(
            employee_id=employee.employee_id,
            allowed_absence_days=employee.allowed_absence_days,
            total_absence_days=employee.total_absence_days,
            remaining_absence_days=employee.remaining_absence_days,
            allowed_late_early_hours=employee.allowed_late_early_hours,
            used_late_early_hours=employee.used_late_early_hours,
            remaining_late_early_hours=employee.remaining_late_early_hours,
        )

    def to_record(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "allowedAbsenceDays": self.allowed_absence_days,
            "totalAbsenceDays": self.total_absence_days,
            "remainingAbsenceDays": self.remaining_absence_days,
            "totalLateEarlyHours": float(self.allowed_late_early_hours),
            "usedLateEarlyHours": float(self.used_late_early_hours),
            "remainingLateEarlyHours": float(self.remaining_late_early_hours),
        }
