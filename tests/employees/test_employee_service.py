from decimal import Decimal

import pytest

from src.attendance_ledger.attendance_ledger.authority import model as auth
from src.attendance_ledger.attendance_ledger.core.enums import AuditAction, Role
from src.attendance_ledger.attendance_ledger.core.exceptions import NotFoundError, Unauthorized, ValidationError


@pytest.fixture
def service(container):
    return container.employee_service


def test_balance_snapshot(service, store):
    store.add_employee("worn", Role.EMPLOYEE, total_absence_days=5, used_late_early_hours=Decimal("2.25"))

    snapshot = service.get_balance_snapshot("worn")

    assert snapshot.remaining_absence_days == 15
    assert snapshot.remaining_late_early_hours == Decimal("5.75")
    assert snapshot.to_record()["remainingLateEarlyHours"] == 5.75
    with pytest.raises(Unauthorized):
        service.get_balance_snapshot("worn", actor_id="emp")
    with pytest.raises(NotFoundError):
        service.get_balance_snapshot("ghost")


def test_admin_sets_allowances(service, store):
    updated = service.set_allowances(
        actor_id="admin", employee_id="emp", allowed_absence_days=25, allowed_late_early_hours="10.5"
    )

    assert updated.allowed_absence_days == 25
    assert updated.allowed_late_early_hours == Decimal("10.50")
    assert store.employees["emp"].version == 2
    assert store.audit[-1].action == AuditAction.SET_ALLOWANCES
    assert store.audit[-1].before["allowedAbsenceDays"] == 20


def test_allowance_cannot_drop_below_usage(service, store):
    store.add_employee("busy", Role.EMPLOYEE, total_absence_days=12)

    with pytest.raises(ValidationError):
        service.set_allowances(actor_id="admin", employee_id="busy", allowed_absence_days=10)
    with pytest.raises(ValidationError):
        service.set_allowances(actor_id="admin", employee_id="busy")
    assert store.employees["busy"].allowed_absence_days == 20


def test_allowance_values_must_be_numbers(service, store):
    for bad in ({"allowed_absence_days": "many"}, {"allowed_absence_days": True}, {"allowed_late_early_hours": "x"}):
        with pytest.raises(ValidationError):
            service.set_allowances(actor_id="admin", employee_id="emp", **bad)

    updated = service.set_allowances(
        actor_id="admin", employee_id="emp", allowed_absence_days="22", allowed_late_early_hours="6.5"
    )

    assert updated.allowed_absence_days == 22
    assert updated.allowed_late_early_hours == Decimal("6.50")


def test_authorities_must_be_strings(service, store):
    with pytest.raises(ValidationError):
        service.set_authorities(actor_id="admin", employee_id="emp", authorities=[auth.CHECK_IN_OUT, 7])
    assert store.employees["emp"].authorities is None


def test_manager_cannot_edit_allowances(service):
    with pytest.raises(Unauthorized):
        service.set_allowances(actor_id="manager", employee_id="emp", allowed_absence_days=30)


def test_set_and_reset_authorities(service, store, container):
    updated = service.set_authorities(
        actor_id="admin", employee_id="manager", authorities=[auth.ACTION_MANAGER_REQUESTS, auth.CHECK_IN_OUT]
    )

    assert updated.authorities == frozenset({auth.ACTION_MANAGER_REQUESTS, auth.CHECK_IN_OUT})
    assert container.authority.can_action_request(updated, store.employees["manager2"])

    reset = service.set_authorities(actor_id="admin", employee_id="manager", authorities=None)
    assert reset.authorities is None
    assert store.audit[-1].action == AuditAction.SET_AUTHORITIES

    with pytest.raises(ValidationError):
        service.set_authorities(actor_id="admin", employee_id="manager", authorities=["Fly"])


def test_role_change_drops_custom_authorities(service, store):
    store.add_employee("rising", Role.EMPLOYEE, authorities=frozenset({auth.CHECK_IN_OUT}))

    promoted = service.change_role(actor_id="admin", employee_id="rising", role="MANAGER")

    assert promoted.role == Role.MANAGER
    assert promoted.role_level == 2
    assert promoted.authorities is None
    assert store.audit[-1].action == AuditAction.SET_ROLE


def test_role_change_rules(service):
    with pytest.raises(ValidationError):
        service.change_role(actor_id="admin", employee_id="admin", role=Role.EMPLOYEE)
    with pytest.raises(ValidationError):
        service.change_role(actor_id="admin", employee_id="emp", role="CEO")
    with pytest.raises(Unauthorized):
        service.change_role(actor_id="manager", employee_id="emp", role=Role.MANAGER)
