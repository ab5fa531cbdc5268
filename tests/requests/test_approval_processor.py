from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.attendance_ledger.attendance_ledger.core.enums import AuditAction, RequestStatus, RequestType, Role
from src.attendance_ledger.attendance_ledger.core.exceptions import (
    AlreadyResolved,
    ConcurrentModification,
    InsufficientBalance,
    NotFoundError,
    Unauthorized,
    ValidationError,
)

MONDAY = date(2025, 3, 3)
TUESDAY = date(2025, 3, 4)


@pytest.fixture
def processor(container):
    return container.request_processor


def _absence(processor, employee_id="emp", start=MONDAY, end=TUESDAY):
    return processor.submit(
        employee_id=employee_id,
        request_type=RequestType.ABSENCE,
        start_date=start,
        end_date=end,
        reason="Family matters",
    )


def test_submit_creates_pending_request_without_touching_balance(processor, store):
    request = _absence(processor)

    assert request.status == RequestStatus.PENDING
    assert request.granted_days is None
    assert store.employees["emp"].total_absence_days == 0
    assert store.requests[request.request_id] == request


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(request_type=RequestType.ABSENCE, start_date=TUESDAY, end_date=MONDAY, reason="x"),
        dict(request_type=RequestType.ABSENCE, start_date=MONDAY, reason="   "),
        dict(request_type=RequestType.LATE_ARRIVAL, start_date=MONDAY, reason="bus"),
        dict(request_type=RequestType.EARLY_LEAVE, start_date=MONDAY, end_date=TUESDAY, reason="x", duration_minutes=30),
        dict(request_type=RequestType.EARLY_LEAVE, start_date=MONDAY, reason="x", duration_minutes=0),
    ],
)
def test_submit_validation(processor, kwargs):
    with pytest.raises(ValidationError):
        processor.submit(employee_id="emp", **kwargs)


def test_approve_debits_whole_days(processor, store):
    request = _absence(processor)

    approved = processor.approve(actor_id="manager", request_id=request.request_id, note="ok")

    assert approved.status == RequestStatus.APPROVED
    assert approved.granted_days == 2
    assert approved.reviewer_id == "manager"
    assert approved.reviewed_at is not None
    assert store.employees["emp"].total_absence_days == 2


def test_second_approval_fails_and_debits_once(processor, store):
    request = _absence(processor)
    processor.approve(actor_id="manager", request_id=request.request_id)

    with pytest.raises(AlreadyResolved):
        processor.approve(actor_id="admin", request_id=request.request_id)

    assert store.employees["emp"].total_absence_days == 2


def test_insufficient_balance_blocks_approval(processor, store):
    store.add_employee("tight", Role.EMPLOYEE, allowed_absence_days=20, total_absence_days=19)
    request = _absence(processor, "tight")

    with pytest.raises(InsufficientBalance) as exc:
        processor.approve(actor_id="manager", request_id=request.request_id)

    assert exc.value.remaining == Decimal(1)
    assert exc.value.requested == Decimal(2)
    assert store.employees["tight"].total_absence_days == 19
    assert store.requests[request.request_id].status == RequestStatus.PENDING
    assert store.audit == []


def test_hourly_request_debits_rounded_hours(processor, store):
    request = processor.submit(
        employee_id="emp",
        request_type=RequestType.LATE_ARRIVAL,
        start_date=MONDAY,
        reason="Train delay",
        duration_minutes=90,
    )

    approved = processor.approve(actor_id="manager", request_id=request.request_id)

    assert approved.granted_hours == Decimal("1.50")
    assert approved.granted_days is None
    assert store.employees["emp"].used_late_early_hours == Decimal("1.50")
    assert store.employees["emp"].remaining_late_early_hours == Decimal("6.50")


def test_manager_cannot_approve_own_request_but_admin_can(processor):
    request = _absence(processor, "manager")

    with pytest.raises(Unauthorized):
        processor.approve(actor_id="manager", request_id=request.request_id)

    assert processor.approve(actor_id="admin", request_id=request.request_id).status == RequestStatus.APPROVED


def test_admin_can_approve_own_request(processor, store):
    request = _absence(processor, "admin")

    assert processor.approve(actor_id="admin", request_id=request.request_id).status == RequestStatus.APPROVED
    assert store.employees["admin"].total_absence_days == 2


def test_tier_rules_for_approvers(processor):
    by_manager2 = _absence(processor, "manager2")
    by_emp = _absence(processor, "emp")

    with pytest.raises(Unauthorized):
        processor.approve(actor_id="manager", request_id=by_manager2.request_id)
    with pytest.raises(Unauthorized):
        processor.approve(actor_id="emp2", request_id=by_emp.request_id)


def test_reject_has_no_ledger_effect(processor, store):
    request = _absence(processor)

    rejected = processor.reject(actor_id="manager", request_id=request.request_id, note="Busy week")

    assert rejected.status == RequestStatus.REJECTED
    assert rejected.review_note == "Busy week"
    assert store.employees["emp"].total_absence_days == 0
    with pytest.raises(AlreadyResolved):
        processor.approve(actor_id="manager", request_id=request.request_id)


def test_revoke_restores_balance_and_is_audited(processor, store):
    request = _absence(processor)
    processor.approve(actor_id="manager", request_id=request.request_id)

    revoked = processor.revoke(actor_id="admin", request_id=request.request_id, note="Entered by mistake")

    assert revoked.status == RequestStatus.REVOKED
    assert revoked.revoked_by == "admin"
    assert store.employees["emp"].total_absence_days == 0
    entry = store.audit[-1]
    assert entry.action == AuditAction.REVOKE
    assert entry.before["balance"]["totalAbsenceDays"] == 2
    assert entry.after["balance"]["totalAbsenceDays"] == 0
    assert entry.after["request"]["status"] == "revoked"

    with pytest.raises(AlreadyResolved):
        processor.revoke(actor_id="admin", request_id=request.request_id)


def test_only_revoke_authority_can_revoke(processor):
    request = _absence(processor)
    processor.approve(actor_id="manager", request_id=request.request_id)

    with pytest.raises(Unauthorized):
        processor.revoke(actor_id="manager", request_id=request.request_id)


def test_pending_request_cannot_be_revoked(processor):
    request = _absence(processor)

    with pytest.raises(AlreadyResolved):
        processor.revoke(actor_id="admin", request_id=request.request_id)


def test_approval_and_revoke_toggle_permission_on_attendance(container, store):
    processor = container.request_processor
    container.attendance_service.check_in("emp", now=datetime(2025, 3, 3, 9, 0))
    request = processor.submit(
        employee_id="emp",
        request_type=RequestType.LATE_ARRIVAL,
        start_date=MONDAY,
        reason="Train delay",
        duration_minutes=60,
    )

    processor.approve(actor_id="manager", request_id=request.request_id)
    assert store.records[("emp", MONDAY)].has_permission is True

    processor.revoke(actor_id="admin", request_id=request.request_id)
    assert store.records[("emp", MONDAY)].has_permission is False
    assert store.employees["emp"].used_late_early_hours == Decimal("0.00")


def test_conflicts_are_retried(processor, store):
    request = _absence(processor)
    store.employee_conflicts = 2

    processor.approve(actor_id="manager", request_id=request.request_id)

    assert store.employees["emp"].total_absence_days == 2


def test_conflicts_surface_after_the_retry_budget(processor, store):
    request = _absence(processor)
    store.employee_conflicts = 3

    with pytest.raises(ConcurrentModification):
        processor.approve(actor_id="manager", request_id=request.request_id)

    assert store.employees["emp"].total_absence_days == 0
    assert store.requests[request.request_id].status == RequestStatus.PENDING


def test_concurrent_approvals_cannot_both_pass_the_balance_check(processor, store):
    store.add_employee("racer", Role.EMPLOYEE, allowed_absence_days=3)
    first = _absence(processor, "racer")
    second = _absence(processor, "racer")

    def approve(request_id):
        try:
            return processor.approve(actor_id="manager", request_id=request_id)
        except InsufficientBalance as exc:
            return exc

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(approve, [first.request_id, second.request_id]))

    assert sum(isinstance(r, InsufficientBalance) for r in results) == 1
    assert store.employees["racer"].total_absence_days == 2


def test_pending_list_only_shows_actionable_requests(processor):
    by_emp = _absence(processor, "emp")
    _absence(processor, "manager2")

    pending = processor.list_pending(actor_id="manager")

    assert [r.request_id for r in pending] == [by_emp.request_id]
    assert len(processor.list_pending(actor_id="admin")) == 2
    with pytest.raises(Unauthorized):
        processor.list_pending(actor_id="emp")


def test_request_lookup(processor):
    request = _absence(processor)

    assert processor.get_request(actor_id="emp", request_id=request.request_id) == request
    assert [r.request_id for r in processor.list_for_employee(actor_id="manager", employee_id="emp")] == [
        request.request_id
    ]
    with pytest.raises(Unauthorized):
        processor.get_request(actor_id="emp2", request_id=request.request_id)
    with pytest.raises(NotFoundError):
        processor.approve(actor_id="manager", request_id="missing")
