from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence, Tuple

from ..audit.service import record_action
from ..authority.service import RoleAuthorityModel
from ..common.datetime_utils import iter_dates, now_local
from ..common.locks import KeyedLocks
from ..common.retry import retry_on_conflict
from ..common.validators import require_date_range, require_non_empty
from ..core.constants import DEFAULT_MAX_APPROVAL_RETRIES
from ..core.enums import AuditAction, RequestStatus, RequestType
from ..core.exceptions import AlreadyResolved, NotFoundError, Unauthorized, ValidationError
from ..employees.model import Employee
from ..ledger import service as ledger
from ..store import LedgerStore, StoreSession
from ..timecalc.arithmetic import round_hours
from .model import LeaveRequest

logger = logging.getLogger(__name__)


def grant_for(request: LeaveRequest) -> Tuple[Optional[int], Optional[Decimal]]:
    """(days, hours) an approval of `request` debits: inclusive calendar days for Absence, rounded hours otherwise."""

    if request.request_type == RequestType.ABSENCE:
        return (request.end_date - request.start_date).days + 1, None
    return None, round_hours(Decimal(int(request.duration_minutes or 0)) / 60)


class RequestApprovalProcessor:
    """Moves requests through pending -> approved|rejected -> revoked.

    Approval and revocation touch three things: the request row, the author's
    balance counters and the author's attendance records for the covered
    dates. All of them, plus the audit entry, are written in one transaction
    while holding the author's lock. The request is saved with a status
    compare-and-swap, so a second approval can never debit twice.
    """

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
    def _get_employee(session: StoreSession, employee_id: str) -> Employee:
        employee = session.employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    @staticmethod
    def _get_request(session: StoreSession, request_id: str) -> LeaveRequest:
        request = session.requests.get(request_id)
        if not request:
            raise NotFoundError("Request not found")
        return request

    def submit(
        self,
        *,
        employee_id: str,
        request_type: RequestType,
        start_date: date,
        end_date: Optional[date] = None,
        reason: str,
        duration_minutes: Optional[int] = None,
    ) -> LeaveRequest:
        reason = require_non_empty(reason, "Reason")
        request_type = RequestType(request_type)
        end_date = end_date or start_date
        require_date_range(start_date, end_date)

        if request_type.is_hourly:
            if end_date != start_date:
                raise ValidationError(f"{request_type.value} requests cover a single day")
            if duration_minutes is None or int(duration_minutes) <= 0:
                raise ValidationError("Duration must be a positive number of minutes")
            duration_minutes = int(duration_minutes)
        else:
            duration_minutes = None

        with self._store.atomic() as session:
            employee = self._get_employee(session, employee_id)
            self._authority.require(self._authority.can_submit(employee), "Not allowed to submit requests")
            request = session.requests.create(
                LeaveRequest(
                    request_id=str(uuid.uuid4()),
                    employee_id=employee.employee_id,
                    request_type=request_type,
                    start_date=start_date,
                    end_date=end_date,
                    reason=reason,
                    status=RequestStatus.PENDING,
                    created_at=self._clock(),
                    duration_minutes=duration_minutes,
                )
            )

        logger.info("Request %s submitted by %s (%s)", request.request_id, employee_id, request_type.value)
        return request

    def _author_of(self, request_id: str) -> str:
        with self._store.atomic() as session:
            return self._get_request(session, request_id).employee_id

    def _locked(self, request_id: str, label: str, operation: Callable[[], LeaveRequest]) -> LeaveRequest:
        with self._locks.hold(self._author_of(request_id)):
            return retry_on_conflict(operation, attempts=self._max_retries, label=f"{label} {request_id}")

    def approve(self, *, actor_id: str, request_id: str, note: str = "") -> LeaveRequest:
        """Approve a pending request and debit the author's balance.

        Over-draft is not allowed: when the grant exceeds the remaining balance
        InsufficientBalance propagates and nothing is written.
        """

        def attempt() -> LeaveRequest:
            now = self._clock()
            with self._store.atomic() as session:
                actor = self._get_employee(session, actor_id)
                request = self._get_request(session, request_id)
                author = self._get_employee(session, request.employee_id)
                self._authority.require(
                    self._authority.can_action_request(actor, author), "Not allowed to approve this request"
                )
                if not request.is_pending:
                    raise AlreadyResolved(f"Request already {request.status.value}")

                days, hours = grant_for(request)
                if days is not None:
                    updated_author = ledger.debit_absence_days(author, days)
                else:
                    updated_author = ledger.debit_late_early_hours(author, hours)

                approved = request.with_changes(
                    status=RequestStatus.APPROVED,
                    granted_days=days,
                    granted_hours=hours,
                    reviewer_id=actor.employee_id,
                    reviewed_at=now,
                    review_note=(note or "").strip() or None,
                )
                session.employees.save(updated_author)
                saved = session.requests.save(approved, expected_status=RequestStatus.PENDING)
                self._backfill_permission(session, saved, granted=True)
                record_action(
                    session,
                    actor_id=actor.employee_id,
                    action=AuditAction.APPROVE,
                    entity_type="request",
                    entity_id=request.request_id,
                    before={"request": request.to_record(), "balance": author.to_record()},
                    after={"request": saved.to_record(), "balance": updated_author.to_record()},
                    now=now,
                    note=saved.review_note,
                )
                return saved

        approved = self._locked(request_id, "approve", attempt)
        logger.info("Request %s approved by %s", request_id, actor_id)
        return approved

    def reject(self, *, actor_id: str, request_id: str, note: str = "") -> LeaveRequest:
        def attempt() -> LeaveRequest:
            now = self._clock()
            with self._store.atomic() as session:
                actor = self._get_employee(session, actor_id)
                request = self._get_request(session, request_id)
                author = self._get_employee(session, request.employee_id)
                self._authority.require(
                    self._authority.can_action_request(actor, author), "Not allowed to reject this request"
                )
                if not request.is_pending:
                    raise AlreadyResolved(f"Request already {request.status.value}")

                rejected = request.with_changes(
                    status=RequestStatus.REJECTED,
                    reviewer_id=actor.employee_id,
                    reviewed_at=now,
                    review_note=(note or "").strip() or None,
                )
                saved = session.requests.save(rejected, expected_status=RequestStatus.PENDING)
                record_action(
                    session,
                    actor_id=actor.employee_id,
                    action=AuditAction.REJECT,
                    entity_type="request",
                    entity_id=request.request_id,
                    before={"request": request.to_record()},
                    after={"request": saved.to_record()},
                    now=now,
                    note=saved.review_note,
                )
                return saved

        rejected = self._locked(request_id, "reject", attempt)
        logger.info("Request %s rejected by %s", request_id, actor_id)
        return rejected

    def revoke(self, *, actor_id: str, request_id: str, note: str = "") -> LeaveRequest:
        """Undo an approval: credit the grant back and mark the request revoked."""

        def attempt() -> LeaveRequest:
            now = self._clock()
            with self._store.atomic() as session:
                actor = self._get_employee(session, actor_id)
                request = self._get_request(session, request_id)
                reviewer = session.employees.get_by_id(request.reviewer_id) if request.reviewer_id else None
                self._authority.require(self._authority.can_revoke(actor, reviewer), "Not allowed to revoke this approval")
                if request.status != RequestStatus.APPROVED:
                    raise AlreadyResolved(f"Only approved requests can be revoked (status is {request.status.value})")

                author = self._get_employee(session, request.employee_id)
                if request.granted_days is not None:
                    updated_author = ledger.credit_absence_days(author, request.granted_days)
                else:
                    updated_author = ledger.credit_late_early_hours(author, request.granted_hours or 0)

                revoked = request.with_changes(status=RequestStatus.REVOKED, revoked_by=actor.employee_id, revoked_at=now)
                session.employees.save(updated_author)
                saved = session.requests.save(revoked, expected_status=RequestStatus.APPROVED)
                self._backfill_permission(session, saved, granted=False)
                record_action(
                    session,
                    actor_id=actor.employee_id,
                    action=AuditAction.REVOKE,
                    entity_type="request",
                    entity_id=request.request_id,
                    before={"request": request.to_record(), "balance": author.to_record()},
                    after={"request": saved.to_record(), "balance": updated_author.to_record()},
                    now=now,
                    note=(note or "").strip() or None,
                )
                return saved

        revoked = self._locked(request_id, "revoke", attempt)
        logger.warning("Approval of request %s revoked by %s", request_id, actor_id)
        return revoked

    @staticmethod
    def _backfill_permission(session: StoreSession, request: LeaveRequest, *, granted: bool) -> None:
        """Set has_permission on the author's stored records the request covers."""

        for work_date in iter_dates(request.start_date, request.end_date):
            record = session.attendance.get_for_employee_and_date(request.employee_id, work_date)
            if record is None:
                continue
            if granted:
                permission = True
            else:
                others = [
                    r
                    for r in session.requests.find_covering(
                        request.employee_id, work_date, request_type=request.request_type, status=RequestStatus.APPROVED
                    )
                    if r.request_id != request.request_id
                ]
                permission = bool(others)
            if record.has_permission != permission:
                session.attendance.save(record.with_changes(has_permission=permission))

    def get_request(self, *, actor_id: str, request_id: str) -> LeaveRequest:
        with self._store.atomic() as session:
            actor = self._get_employee(session, actor_id)
            request = self._get_request(session, request_id)
            self._authority.require(
                self._authority.can_view_employee(actor, request.employee_id), "Not allowed to view this request"
            )
            return request

    def list_for_employee(self, *, actor_id: str, employee_id: str, limit: int = 200) -> Sequence[LeaveRequest]:
        with self._store.atomic() as session:
            actor = self._get_employee(session, actor_id)
            self._authority.require(
                self._authority.can_view_employee(actor, employee_id), "Not allowed to view these requests"
            )
            return session.requests.list_requests(employee_id=employee_id, limit=int(limit))

    def list_pending(self, *, actor_id: str, limit: int = 500) -> Sequence[LeaveRequest]:
        """Pending requests the actor is allowed to action."""

        with self._store.atomic() as session:
            actor = self._get_employee(session, actor_id)
            if not self._authority.can_approve_requests(actor):
                raise Unauthorized("Not allowed to review requests")
            pending = session.requests.list_requests(status=RequestStatus.PENDING, limit=int(limit))
            visible = []
            for request in pending:
                author = session.employees.get_by_id(request.employee_id)
                if author is not None and self._authority.can_action_request(actor, author):
                    visible.append(request)
            return visible
