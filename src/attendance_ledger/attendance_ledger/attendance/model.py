from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..common.datetime_utils import fmt_hhmm
from ..core.enums import Classification, SessionState


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day.

    A record with no check-in is an absence written by the reconciliation pass.
    """

    employee_id: str
    work_date: date
    state: SessionState
    classification: Classification
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    break_started_at: Optional[datetime] = None
    break_seconds: int = 0
    total_hours: Decimal = Decimal("0.00")
    late_minutes: int = 0
    overtime_minutes: int = 0
    early_leave_minutes: int = 0
    has_permission: bool = False
    note: Optional[str] = None
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.check_in is not None and self.check_out is None

    @property
    def is_absence(self) -> bool:
        return self.check_in is None

    def with_changes(self, **changes) -> "AttendanceRecord":
        return replace(self, **changes)

    def to_record(self) -> dict:
        """JSON shape consumed by the export/report tooling."""

        return {
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "checkIn": fmt_hhmm(self.check_in),
            "checkOut": fmt_hhmm(self.check_out),
            "state": self.state.value,
            "totalHours": float(self.total_hours),
            "breakMinutes": self.break_seconds // 60,
            "lateArrival": self.late_minutes,
            "earlyLeave": self.early_leave_minutes,
            "overtime": self.overtime_minutes,
            "attendance": self.classification.value,
            "hasPermission": self.has_permission,
            "note": self.note,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Per-employee aggregate over a date range."""

    employee_id: str
    start_date: date
    end_date: date
    allowed_absence: int = 0
    unallowed_absence: int = 0
    authorized_absence: int = 0
    unauthorized_absence: int = 0
    overtime: int = 0
    late_arrival: int = 0
    total_days: int = 0

    def to_record(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "allowedAbsence": self.allowed_absence,
            "unallowedAbsence": self.unallowed_absence,
            "authorizedAbsence": self.authorized_absence,
            "unauthorizedAbsence": self.unauthorized_absence,
            "overtime": self.overtime,
            "lateArrival": self.late_arrival,
            "totalDays": self.total_days,
        }
