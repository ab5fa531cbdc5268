from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import Classification
from ..model import AttendanceRecord


class ClassificationStrategy(ABC):
    """Strategy Pattern: encapsulate how a day's classification is decided."""

    @abstractmethod
    def on_check_in(self, record: AttendanceRecord) -> Classification:
        raise NotImplementedError

    @abstractmethod
    def on_check_out(self, record: AttendanceRecord) -> Classification:
        raise NotImplementedError
