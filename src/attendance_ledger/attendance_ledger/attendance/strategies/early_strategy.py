from __future__ import annotations

from ...core.enums import Classification
from ..model import AttendanceRecord
from .base import ClassificationStrategy


class EarlyLeaveStrategy(ClassificationStrategy):
    """On-time check-in followed by a short day."""

    def on_check_in(self, record: AttendanceRecord) -> Classification:
        return Classification.PRESENT

    def on_check_out(self, record: AttendanceRecord) -> Classification:
        return Classification.EARLY_LEAVE
