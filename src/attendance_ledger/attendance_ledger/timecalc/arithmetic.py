"""Pure duration arithmetic for attendance sessions.

Every public function rounds exactly once, half-up: hours to 2 decimal
places, minutes to whole minutes. Callers keep raw seconds until they need a
reported value and never round an already rounded number again.
"""

from __future__ import annotations

from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

TimeLike = Union[datetime, time]

SECONDS_PER_DAY = 24 * 3600
_HOURS_QUANT = Decimal("0.01")
_MINUTES_QUANT = Decimal("1")


def round_hours(value) -> Decimal:
    return Decimal(str(value)).quantize(_HOURS_QUANT, rounding=ROUND_HALF_UP)


def round_minutes(seconds) -> int:
    return int((Decimal(str(seconds)) / 60).quantize(_MINUTES_QUANT, rounding=ROUND_HALF_UP))


def seconds_to_hours(seconds) -> Decimal:
    return round_hours(Decimal(str(seconds)) / 3600)


def _seconds_between(start: TimeLike, end: TimeLike) -> int:
    if isinstance(start, datetime) and isinstance(end, datetime):
        return int((end - start).total_seconds())
    return _seconds_of_day(end) - _seconds_of_day(start)


def _seconds_of_day(value: TimeLike) -> int:
    t = value.time() if isinstance(value, datetime) else value
    return t.hour * 3600 + t.minute * 60 + t.second


def elapsed_seconds(check_in: TimeLike, check_out: TimeLike) -> int:
    """Raw seconds between check-in and check-out.

    A negative difference means the session crossed midnight, so a day is added.
    """

    diff = _seconds_between(check_in, check_out)
    if diff < 0:
        diff += SECONDS_PER_DAY
    return diff


def elapsed_hours(check_in: TimeLike, check_out: TimeLike) -> Decimal:
    return seconds_to_hours(elapsed_seconds(check_in, check_out))


def lateness_minutes(check_in: TimeLike, shift_start: TimeLike) -> int:
    return round_minutes(max(0, _seconds_between(shift_start, check_in)))


def early_leave_minutes(check_out: TimeLike, shift_end: TimeLike) -> int:
    return round_minutes(max(0, _seconds_between(check_out, shift_end)))


def minutes_past(moment: TimeLike, boundary: TimeLike) -> int:
    """Whole minutes `moment` lies after `boundary`, 0 if before."""
    return round_minutes(max(0, _seconds_between(boundary, moment)))


def overtime_hours(worked_hours, shift_length_hours) -> Decimal:
    return round_hours(max(Decimal("0"), Decimal(str(worked_hours)) - Decimal(str(shift_length_hours))))
