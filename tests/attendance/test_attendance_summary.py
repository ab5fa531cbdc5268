from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from src.attendance_ledger.attendance_ledger.attendance.model import AttendanceRecord
from src.attendance_ledger.attendance_ledger.attendance.service import AttendanceService
from src.attendance_ledger.attendance_ledger.core.enums import Classification, SessionState
from src.attendance_ledger.attendance_ledger.core.exceptions import NotFoundError, Unauthorized, ValidationError
from src.attendance_ledger.attendance_ledger.shifts.model import ShiftPolicy


def _worked(day, *, classification, late=0, overtime=0, early=0, permission=False, hours="8.00"):
    return AttendanceRecord(
        employee_id="emp",
        work_date=date(2025, 3, day),
        state=SessionState.CHECKED_OUT,
        classification=classification,
        check_in=datetime(2025, 3, day, 8, late),
        check_out=datetime(2025, 3, day, 16, 0) - timedelta(minutes=early),
        total_hours=Decimal(hours),
        late_minutes=late,
        overtime_minutes=overtime,
        early_leave_minutes=early,
        has_permission=permission,
        version=1,
    )


def _absent(day, *, permission):
    return AttendanceRecord(
        employee_id="emp",
        work_date=date(2025, 3, day),
        state=SessionState.NOT_STARTED,
        classification=Classification.ABSENT,
        has_permission=permission,
        version=1,
    )


@pytest.fixture
def service(container, store):
    for record in (
        _worked(3, classification=Classification.LATE, late=15, overtime=30),
        _worked(4, classification=Classification.COMPLETED),
        _worked(5, classification=Classification.EARLY_LEAVE, early=90, hours="6.50"),
        _worked(6, classification=Classification.EARLY_LEAVE, early=60, permission=True, hours="7.00"),
        _absent(7, permission=True),
        _absent(10, permission=False),
        _worked(11, classification=Classification.LATE, late=20, permission=True),
        # late and short: classified Late but still an uncovered short day
        _worked(12, classification=Classification.LATE, late=15, early=120, hours="5.75"),
    ):
        store.records[(record.employee_id, record.work_date)] = record
    return container.attendance_service


def test_summary_counts_each_bucket(service):
    summary = service.get_attendance_summary("emp", date(2025, 3, 3), date(2025, 3, 12))

    assert summary.to_record() == {
        "employeeId": "emp",
        "startDate": "2025-03-03",
        "endDate": "2025-03-12",
        "allowedAbsence": 2,
        "unallowedAbsence": 2,
        "authorizedAbsence": 1,
        "unauthorizedAbsence": 1,
        "overtime": 1,
        "lateArrival": 3,
        "totalDays": 8,
    }


def test_summary_respects_the_date_range(service):
    summary = service.get_attendance_summary("emp", date(2025, 3, 4), date(2025, 3, 6))

    assert summary.total_days == 3
    assert summary.late_arrival == 0
    assert summary.unallowed_absence == 1
    assert summary.allowed_absence == 1


def test_summary_visibility(service):
    assert service.get_attendance_summary("emp", date(2025, 3, 3), date(2025, 3, 3), actor_id="manager").total_days == 1
    assert service.get_attendance_summary("emp", date(2025, 3, 3), date(2025, 3, 3), actor_id="emp").total_days == 1
    with pytest.raises(Unauthorized):
        service.get_attendance_summary("emp", date(2025, 3, 3), date(2025, 3, 3), actor_id="emp2")


def test_summary_validation(service):
    with pytest.raises(ValidationError):
        service.get_attendance_summary("emp", date(2025, 3, 5), date(2025, 3, 3))
    with pytest.raises(NotFoundError):
        service.get_attendance_summary("ghost", date(2025, 3, 3), date(2025, 3, 5))


def test_late_day_that_ends_early_is_unallowed(container):
    service = container.attendance_service
    service.check_in("emp2", now=datetime(2025, 3, 3, 8, 15))
    record = service.check_out("emp2", now=datetime(2025, 3, 3, 14, 0))
    assert record.classification == Classification.LATE
    assert record.total_hours == Decimal("5.75")

    summary = service.get_attendance_summary("emp2", date(2025, 3, 3), date(2025, 3, 3))

    assert summary.unallowed_absence == 1
    assert summary.late_arrival == 1


def test_lateness_within_grace_is_not_counted(store):
    service = AttendanceService(store, policy=ShiftPolicy(grace_minutes=5))
    service.check_in("emp2", now=datetime(2025, 3, 3, 8, 3))
    service.check_out("emp2", now=datetime(2025, 3, 3, 16, 0))
    late_day = service.check_in("emp2", now=datetime(2025, 3, 4, 8, 10))
    service.check_out("emp2", now=datetime(2025, 3, 4, 16, 10))
    assert late_day.classification == Classification.LATE

    summary = service.get_attendance_summary("emp2", date(2025, 3, 3), date(2025, 3, 4))

    assert summary.late_arrival == 1
    assert summary.total_days == 2
