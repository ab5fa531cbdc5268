from datetime import datetime, time
from decimal import Decimal

from src.attendance_ledger.attendance_ledger.timecalc.arithmetic import (
    early_leave_minutes,
    elapsed_hours,
    elapsed_seconds,
    lateness_minutes,
    minutes_past,
    overtime_hours,
    round_hours,
    round_minutes,
    seconds_to_hours,
)


def test_round_hours_is_half_up():
    assert round_hours(Decimal("8.255")) == Decimal("8.26")
    assert round_hours(Decimal("8.254")) == Decimal("8.25")
    assert round_hours(2) == Decimal("2.00")


def test_round_minutes_is_half_up():
    assert round_minutes(90) == 2
    assert round_minutes(89) == 1
    assert round_minutes(29) == 0


def test_elapsed_across_midnight_adds_a_day():
    assert elapsed_seconds(time(22, 0), time(6, 0)) == 8 * 3600


def test_elapsed_hours_between_datetimes():
    assert elapsed_hours(datetime(2025, 3, 3, 8, 0), datetime(2025, 3, 3, 16, 30)) == Decimal("8.50")
    assert seconds_to_hours(29700) == Decimal("8.25")


def test_lateness_minutes():
    assert lateness_minutes(time(8, 15), time(8, 0)) == 15
    assert lateness_minutes(time(7, 50), time(8, 0)) == 0
    assert lateness_minutes(datetime(2025, 3, 3, 8, 15, 40), datetime(2025, 3, 3, 8, 0)) == 16


def test_early_leave_and_minutes_past_shift_end():
    assert early_leave_minutes(time(15, 30), time(16, 0)) == 30
    assert early_leave_minutes(time(16, 30), time(16, 0)) == 0
    assert minutes_past(time(16, 30), time(16, 0)) == 30
    assert minutes_past(time(15, 0), time(16, 0)) == 0


def test_overtime_hours_never_negative():
    assert overtime_hours(Decimal("8.25"), 8) == Decimal("0.25")
    assert overtime_hours(Decimal("7.50"), 8) == Decimal("0.00")
