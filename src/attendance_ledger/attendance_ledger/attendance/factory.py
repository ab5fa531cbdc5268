from __future__ import annotations

from dataclasses import dataclass

from ..shifts.model import ShiftPolicy
from .model import AttendanceRecord
from .strategies.base import ClassificationStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class ClassificationStrategyFactory:
    """Factory Pattern: choose the classification strategy from the record's durations."""

    def for_check_in(self, *, record: AttendanceRecord, policy: ShiftPolicy) -> ClassificationStrategy:
        if record.late_minutes > policy.grace_minutes:
            return LateStrategy()
        return NormalStrategy()

    def for_check_out(self, *, record: AttendanceRecord, policy: ShiftPolicy) -> ClassificationStrategy:
        if record.late_minutes > policy.grace_minutes:
            return LateStrategy()
        if record.early_leave_minutes > 0 and record.total_hours < policy.length_hours:
            return EarlyLeaveStrategy()
        return NormalStrategy()
