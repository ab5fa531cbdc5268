from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Optional

from ..audit.service import record_action
from ..authority import model as auth
from ..authority.service import RoleAuthorityModel
from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.retry import retry_on_conflict
from ..common.validators import require_decimal, require_int, require_non_negative
from ..core.constants import DEFAULT_MAX_APPROVAL_RETRIES
from ..core.enums import AuditAction, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..store import LedgerStore, StoreSession
from ..timecalc.arithmetic import round_hours
from .model import BalanceSnapshot, Employee

logger = logging.getLogger(__name__)


class EmployeeService:
    """Balance read-model plus the admin operations that change an employee's
    allowances, role or authority set. Every change is audited."""

    def __init__(
        self,
        store: LedgerStore,
        authority: RoleAuthorityModel,
        *,
        locks: Optional[KeyedLocks] = None,
        max_retries: int = DEFAULT_MAX_APPROVAL_RETRIES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._authority = authority
        self._locks = locks or KeyedLocks()
        self._max_retries = int(max_retries)
        self._clock = clock

    @staticmethod
    def _get(session: StoreSession, employee_id: str) -> Employee:
        employee = session.employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_employee(self, *, actor_id: str, employee_id: str) -> Employee:
        with self._store.atomic() as session:
            actor = self._get(session, actor_id)
            self._authority.require(
                self._authority.can_view_employee(actor, employee_id), "Not allowed to view this employee"
            )
            return self._get(session, employee_id)

    def get_balance_snapshot(self, employee_id: str, *, actor_id: Optional[str] = None) -> BalanceSnapshot:
        with self._store.atomic() as session:
            if actor_id is not None:
                actor = self._get(session, actor_id)
                self._authority.require(
                    self._authority.can_view_employee(actor, employee_id), "Not allowed to view this balance"
                )
            return BalanceSnapshot.of(self._get(session, employee_id))

    def _update(
        self,
        *,
        actor_id: str,
        employee_id: str,
        authority: str,
        denied: str,
        action: AuditAction,
        change: Callable[[Employee], Employee],
    ) -> Employee:
        def attempt() -> Employee:
            now = self._clock()
            with self._store.atomic() as session:
                actor = self._get(session, actor_id)
                self._authority.require(self._authority.has_authority(actor, authority), denied)
                before = self._get(session, employee_id)
                saved = session.employees.save(change(before))
                record_action(
                    session,
                    actor_id=actor.employee_id,
                    action=action,
                    entity_type="employee",
                    entity_id=employee_id,
                    before=before.to_record(),
                    after=saved.to_record(),
                    now=now,
                )
                return saved

        with self._locks.hold(employee_id):
            saved = retry_on_conflict(attempt, attempts=self._max_retries, label=f"{action.value} {employee_id}")
        logger.info("%s applied to %s by %s", action.value, employee_id, actor_id)
        return saved

    def set_allowances(
        self,
        *,
        actor_id: str,
        employee_id: str,
        allowed_absence_days: Optional[int] = None,
        allowed_late_early_hours=None,
    ) -> Employee:
        """Change the allowances; lowering one below what is already used is rejected."""

        if allowed_absence_days is None and allowed_late_early_hours is None:
            raise ValidationError("Nothing to update")
        if allowed_absence_days is not None:
            allowed_absence_days = require_non_negative(
                require_int(allowed_absence_days, "Allowed absence days"), "Allowed absence days"
            )
        if allowed_late_early_hours is not None:
            allowed_late_early_hours = round_hours(
                require_non_negative(require_decimal(allowed_late_early_hours, "Allowed hours"), "Allowed hours")
            )

        def change(employee: Employee) -> Employee:
            days = employee.allowed_absence_days
            hours = employee.allowed_late_early_hours
            if allowed_absence_days is not None:
                days = allowed_absence_days
                if days < employee.total_absence_days:
                    raise ValidationError(
                        f"Allowed absence days cannot be below the {employee.total_absence_days} already used"
                    )
            if allowed_late_early_hours is not None:
                hours = allowed_late_early_hours
                if hours < employee.used_late_early_hours:
                    raise ValidationError(
                        f"Allowed late/early hours cannot be below the {employee.used_late_early_hours} already used"
                    )
            return employee.with_changes(allowed_absence_days=days, allowed_late_early_hours=hours)

        return self._update(
            actor_id=actor_id,
            employee_id=employee_id,
            authority=auth.EDIT_EMPLOYEES,
            denied="Not allowed to edit employees",
            action=AuditAction.SET_ALLOWANCES,
            change=change,
        )

    def set_authorities(self, *, actor_id: str, employee_id: str, authorities: Optional[Iterable[str]]) -> Employee:
        """Replace the employee's customized authority set; None restores the role default."""

        if authorities is not None:
            authorities = list(authorities)
            if not all(isinstance(a, str) for a in authorities):
                raise ValidationError("Authorities must be strings")
            authorities = frozenset(a.strip() for a in authorities)
            unknown = sorted(authorities - auth.ALL_AUTHORITIES)
            if unknown:
                raise ValidationError(f"Unknown authorities: {', '.join(unknown)}")

        return self._update(
            actor_id=actor_id,
            employee_id=employee_id,
            authority=auth.MANAGE_AUTHORITIES,
            denied="Not allowed to manage authorities",
            action=AuditAction.SET_AUTHORITIES,
            change=lambda e: e.with_changes(authorities=authorities),
        )

    def change_role(self, *, actor_id: str, employee_id: str, role: Role) -> Employee:
        """Promote or demote. The customized authority set is dropped so the new role's defaults apply."""

        try:
            role = Role(role)
        except ValueError:
            raise ValidationError(f"Unknown role: {role}")
        if actor_id == employee_id:
            raise ValidationError("Cannot change your own role")

        return self._update(
            actor_id=actor_id,
            employee_id=employee_id,
            authority=auth.PROMOTE_DEMOTE,
            denied="Not allowed to promote or demote employees",
            action=AuditAction.SET_ROLE,
            change=lambda e: e.with_changes(role=role, authorities=None),
        )
