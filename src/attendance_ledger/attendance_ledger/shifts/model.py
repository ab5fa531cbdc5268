from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Tuple

from ..common.datetime_utils import parse_hhmm
from ..core import constants


@dataclass(frozen=True)
class ShiftPolicy:
    """Configured working shift that lateness, overtime and early leave are measured against."""

    start_time: time = time(8, 0)
    end_time: time = time(16, 0)
    length_hours: Decimal = Decimal(constants.DEFAULT_SHIFT_LENGTH_HOURS)
    grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    work_weekdays: Tuple[int, ...] = field(default=constants.DEFAULT_WORK_WEEKDAYS)

    def start_on(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.start_time)

    def end_on(self, work_date: date) -> datetime:
        return datetime.combine(work_date, self.end_time)

    def is_work_day(self, work_date: date) -> bool:
        return work_date.weekday() in self.work_weekdays

    @classmethod
    def from_settings(cls, settings) -> "ShiftPolicy":
        weekdays = getattr(settings, "WORK_WEEKDAYS", constants.DEFAULT_WORK_WEEKDAYS)
        return cls(
            start_time=parse_hhmm(getattr(settings, "SHIFT_START", constants.DEFAULT_SHIFT_START)),
            end_time=parse_hhmm(getattr(settings, "SHIFT_END", constants.DEFAULT_SHIFT_END)),
            length_hours=Decimal(str(getattr(settings, "SHIFT_LENGTH_HOURS", constants.DEFAULT_SHIFT_LENGTH_HOURS))),
            grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", constants.DEFAULT_LATE_GRACE_MINUTES)),
            work_weekdays=tuple(int(d) for d in weekdays),
        )
