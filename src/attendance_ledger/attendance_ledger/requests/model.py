from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import RequestStatus, RequestType


@dataclass(frozen=True)
class LeaveRequest:
    """Absence, late-arrival or early-leave request.

    Absence covers start_date..end_date; hourly requests cover a single day
    and carry duration_minutes. Grants are filled only on approval.
    """

    request_id: str
    employee_id: str
    request_type: RequestType
    start_date: date
    end_date: date
    reason: str
    status: RequestStatus
    created_at: datetime
    duration_minutes: Optional[int] = None
    granted_days: Optional[int] = None
    granted_hours: Optional[Decimal] = None
    reviewer_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_note: Optional[str] = None
    revoked_by: Optional[str] = None
    revoked_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def covers(self, work_date: date) -> bool:
        return self.start_date <= work_date <= self.end_date

    def with_changes(self, **changes) -> "LeaveRequest":
        return replace(self, **changes)

    def to_record(self) -> dict:
        return {
            "id": self.request_id,
            "employeeId": self.employee_id,
            "requestType": self.request_type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "durationMinutes": self.duration_minutes,
            "reason": self.reason,
            "status": self.status.value,
            "grantedDays": self.granted_days,
            "grantedHours": float(self.granted_hours) if self.granted_hours is not None else None,
            "reviewerId": self.reviewer_id,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "reviewNote": self.review_note,
            "revokedBy": self.revoked_by,
            "revokedAt": self.revoked_at.isoformat() if self.revoked_at else None,
            "appliedDate": self.created_at.date().isoformat(),
        }
