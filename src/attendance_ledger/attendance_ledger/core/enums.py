from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of tiers used for authority decisions."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"

    @property
    def level(self) -> int:
        return _ROLE_LEVELS[self]


_ROLE_LEVELS = {Role.ADMIN: 3, Role.MANAGER: 2, Role.EMPLOYEE: 1}


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class SessionState(str, Enum):
    """Per-day session state. Only absence records are stored as NOT_STARTED."""

    NOT_STARTED = "NotStarted"
    CHECKED_IN = "CheckedIn"
    ON_BREAK = "OnBreak"
    CHECKED_OUT = "CheckedOut"


class Classification(str, Enum):
    """Derived daily outcome, exported as the `attendance` field."""

    PRESENT = "Present"
    LATE = "Late"
    EARLY_LEAVE = "EarlyLeave"
    COMPLETED = "Completed"
    ABSENT = "Absent"


class RequestType(str, Enum):
    ABSENCE = "Absence"
    LATE_ARRIVAL = "Late Arrival"
    EARLY_LEAVE = "Early Leave"

    @property
    def is_hourly(self) -> bool:
        return self is not RequestType.ABSENCE


class RequestStatus(str, Enum):
    """Approval flow: pending -> approved|rejected, approved -> revoked."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REVOKED = "revoked"


class AuditAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REVOKE = "revoke"
    SET_AUTHORITIES = "set_authorities"
    SET_ROLE = "set_role"
    SET_ALLOWANCES = "set_allowances"
