from __future__ import annotations

from ...core.enums import Classification
from ..model import AttendanceRecord
from .base import ClassificationStrategy


class LateStrategy(ClassificationStrategy):
    """Late check-in; the day stays Late whatever happens at check-out."""

    def on_check_in(self, record: AttendanceRecord) -> Classification:
        return Classification.LATE

    def on_check_out(self, record: AttendanceRecord) -> Classification:
        return Classification.LATE
