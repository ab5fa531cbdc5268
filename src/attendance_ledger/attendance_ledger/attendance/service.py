from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..authority import model as auth
from ..authority.service import RoleAuthorityModel
from ..common.datetime_utils import now_local
from ..common.locks import KeyedLocks
from ..common.retry import retry_on_conflict
from ..common.validators import require_date_range
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_MAX_APPROVAL_RETRIES
from ..core.enums import Classification, RequestStatus, RequestType, SessionState
from ..core.exceptions import (
    AlreadyCheckedIn,
    InvalidTransition,
    NotCheckedIn,
    NotFoundError,
    Unauthorized,
    ValidationError,
)
from ..employees.model import Employee
from ..shifts.model import ShiftPolicy
from ..store import LedgerStore, StoreSession
from ..timecalc.arithmetic import (
    early_leave_minutes,
    elapsed_seconds,
    lateness_minutes,
    minutes_past,
    round_minutes,
    seconds_to_hours,
)
from .factory import ClassificationStrategyFactory
from .model import AttendanceRecord, AttendanceSummary

logger = logging.getLogger(__name__)


class AttendanceService:
    """Per-day session state machine for one employee.

    NotStarted -> CheckedIn <-> OnBreak, CheckedIn -> CheckedOut (terminal).
    Every transition reads the stored record inside the employee's lock and
    transaction, so client-side state is never trusted.
    """

    def __init__(
        self,
        store: LedgerStore,
        *,
        policy: Optional[ShiftPolicy] = None,
        authority: Optional[RoleAuthorityModel] = None,
        strategy_factory: Optional[ClassificationStrategyFactory] = None,
        locks: Optional[KeyedLocks] = None,
        max_retries: int = DEFAULT_MAX_APPROVAL_RETRIES,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._policy = policy or ShiftPolicy()
        self._authority = authority or RoleAuthorityModel()
        self._factory = strategy_factory or ClassificationStrategyFactory()
        self._locks = locks or KeyedLocks()
        self._max_retries = int(max_retries)
        self._clock = clock

    def _run(self, employee_id: str, label: str, operation: Callable[[], AttendanceRecord]) -> AttendanceRecord:
        with self._locks.hold(employee_id):
            return retry_on_conflict(operation, attempts=self._max_retries, label=label)

    def _require_employee(self, session: StoreSession, employee_id: str) -> Employee:
        employee = session.employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employee not found")
        if not employee.is_active:
            raise Unauthorized("Employee is inactive")
        self._authority.require(
            self._authority.has_authority(employee, auth.CHECK_IN_OUT), "Not allowed to record attendance"
        )
        return employee

    @staticmethod
    def _open_record(session: StoreSession, employee_id: str, today: date) -> Optional[AttendanceRecord]:
        """Today's record, or yesterday's when it is still open (session crossed midnight)."""

        record = session.attendance.get_for_employee_and_date(employee_id, today)
        if record is not None:
            return record
        previous = session.attendance.get_for_employee_and_date(employee_id, today - timedelta(days=1))
        if previous is not None and previous.is_open:
            return previous
        return None

    def check_in(self, employee_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()
        today = now.date()

        def attempt() -> AttendanceRecord:
            with self._store.atomic() as session:
                self._require_employee(session, employee_id)

                existing = session.attendance.get_for_employee_and_date(employee_id, today)
                if existing is not None and existing.is_open:
                    raise AlreadyCheckedIn("Already checked in for today. Please check out first.")
                if existing is not None and existing.check_out is not None:
                    raise InvalidTransition("Already checked out for today")
                self._close_stale_session(session, employee_id, today)

                record = AttendanceRecord(
                    employee_id=employee_id,
                    work_date=today,
                    state=SessionState.CHECKED_IN,
                    classification=Classification.PRESENT,
                    check_in=now,
                    late_minutes=lateness_minutes(now, self._policy.start_on(today)),
                    has_permission=False,
                    version=existing.version if existing is not None else 0,
                )
                strategy = self._factory.for_check_in(record=record, policy=self._policy)
                record = record.with_changes(classification=strategy.on_check_in(record))
                return session.attendance.save(record)

        record = self._run(employee_id, "check-in", attempt)
        logger.info(
            "Employee %s checked in at %s (late %d min)", employee_id, now.strftime("%H:%M"), record.late_minutes
        )
        return record

    def take_break(self, employee_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()

        def attempt() -> AttendanceRecord:
            with self._store.atomic() as session:
                self._require_employee(session, employee_id)
                record = self._open_record(session, employee_id, now.date())
                if record is None or not record.is_open:
                    raise NotCheckedIn("Must check in before taking a break")
                if record.state == SessionState.ON_BREAK:
                    raise InvalidTransition("Already on break")
                return session.attendance.save(record.with_changes(state=SessionState.ON_BREAK, break_started_at=now))

        record = self._run(employee_id, "take-break", attempt)
        logger.info("Employee %s started a break at %s", employee_id, now.strftime("%H:%M"))
        return record

    def resume(self, employee_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()

        def attempt() -> AttendanceRecord:
            with self._store.atomic() as session:
                self._require_employee(session, employee_id)
                record = self._open_record(session, employee_id, now.date())
                if record is None or not record.is_open:
                    raise NotCheckedIn("Must check in before resuming")
                if record.state != SessionState.ON_BREAK or record.break_started_at is None:
                    raise InvalidTransition("Not on break")
                paused = elapsed_seconds(record.break_started_at, now)
                return session.attendance.save(
                    record.with_changes(
                        state=SessionState.CHECKED_IN,
                        break_started_at=None,
                        break_seconds=record.break_seconds + paused,
                    )
                )

        record = self._run(employee_id, "resume", attempt)
        logger.info("Employee %s resumed at %s (break total %ds)", employee_id, now.strftime("%H:%M"), record.break_seconds)
        return record

    def check_out(self, employee_id: str, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or self._clock()

        def attempt() -> AttendanceRecord:
            with self._store.atomic() as session:
                self._require_employee(session, employee_id)
                record = self._open_record(session, employee_id, now.date())
                if record is None or record.is_absence:
                    raise NotCheckedIn("Must check in before checking out")
                if record.check_out is not None:
                    raise InvalidTransition("Already checked out for today")
                if record.state == SessionState.ON_BREAK:
                    raise InvalidTransition("Resume from break before checking out")
                return session.attendance.save(self._closed(session, record, now))

        record = self._run(employee_id, "check-out", attempt)
        logger.info(
            "Employee %s checked out at %s: %sh worked, %s",
            employee_id,
            now.strftime("%H:%M"),
            record.total_hours,
            record.classification.value,
        )
        return record

    def _closed(self, session: StoreSession, record: AttendanceRecord, at: datetime) -> AttendanceRecord:
        """`record` checked out at `at`, with hours, overtime, early leave and classification filled in."""

        worked = max(0, elapsed_seconds(record.check_in, at) - record.break_seconds)
        shift_end = self._policy.end_on(record.work_date)
        beyond_length = max(0, worked - int(self._policy.length_hours * 3600))

        covered = self._has_approved_hourly_request(session, record.employee_id, record.work_date)
        record = record.with_changes(
            check_out=at,
            state=SessionState.CHECKED_OUT,
            break_started_at=None,
            total_hours=seconds_to_hours(worked),
            early_leave_minutes=early_leave_minutes(at, shift_end),
            overtime_minutes=max(minutes_past(at, shift_end), round_minutes(beyond_length)),
            has_permission=record.has_permission or covered,
        )
        strategy = self._factory.for_check_out(record=record, policy=self._policy)
        return record.with_changes(classification=strategy.on_check_out(record))

    def _close_stale_session(self, session: StoreSession, employee_id: str, today: date) -> None:
        """Close a session from an earlier day that never got a check-out.

        It is closed at that day's shift end (or when the session or its break
        started, if later), earns no overtime and is marked with a note.
        """

        stale = next(
            (
                r
                for r in session.attendance.get_recent_for_employee(employee_id, 2)
                if r.work_date < today and r.is_open
            ),
            None,
        )
        if stale is None:
            return
        close_at = max(self._policy.end_on(stale.work_date), stale.check_in)
        if stale.break_started_at is not None:
            close_at = max(close_at, stale.break_started_at)
            stale = stale.with_changes(
                break_seconds=stale.break_seconds + int((close_at - stale.break_started_at).total_seconds())
            )
        closed = self._closed(session, stale, close_at).with_changes(
            overtime_minutes=0, note="Closed automatically: no check-out recorded"
        )
        session.attendance.save(closed)
        logger.warning(
            "Employee %s never checked out on %s; session closed at %s",
            employee_id,
            stale.work_date,
            close_at.strftime("%H:%M"),
        )

    @staticmethod
    def _has_approved_hourly_request(session: StoreSession, employee_id: str, work_date: date) -> bool:
        for request_type in (RequestType.LATE_ARRIVAL, RequestType.EARLY_LEAVE):
            if session.requests.find_covering(
                employee_id, work_date, request_type=request_type, status=RequestStatus.APPROVED
            ):
                return True
        return False

    def get_state(self, employee_id: str, *, now: Optional[datetime] = None) -> SessionState:
        now = now or self._clock()
        with self._store.atomic() as session:
            record = self._open_record(session, employee_id, now.date())
        if record is None or record.is_absence:
            return SessionState.NOT_STARTED
        return record.state

    def get_today_record(self, employee_id: str, today: date) -> Optional[AttendanceRecord]:
        with self._store.atomic() as session:
            return session.attendance.get_for_employee_and_date(employee_id, today)

    def get_history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        with self._store.atomic() as session:
            return session.attendance.get_recent_for_employee(employee_id, int(limit))

    def reconcile_absences(
        self,
        work_date: date,
        *,
        actor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[AttendanceRecord]:
        """End-of-day pass: write an Absent record for every active employee who never checked in.

        The record carries has_permission=True when an approved Absence request
        covers the date (authorized absence), False otherwise (unauthorized).
        Non-working weekdays are skipped. When run on behalf of an actor, the
        actor needs the system administration authority.
        """

        now = now or self._clock()
        if work_date > now.date():
            raise ValidationError("Cannot reconcile a future date")
        if actor_id is not None:
            with self._store.atomic() as session:
                actor = session.employees.get_by_id(actor_id)
            if not actor:
                raise NotFoundError("Employee not found")
            self._authority.require(
                self._authority.has_authority(actor, auth.SYSTEM_ADMINISTRATION),
                "Not allowed to run absence reconciliation",
            )
        if not self._policy.is_work_day(work_date):
            logger.info("Skipping absence reconciliation for non-working day %s", work_date)
            return []

        with self._store.atomic() as session:
            employee_ids = [e.employee_id for e in session.employees.list_active()]

        created: List[AttendanceRecord] = []
        for employee_id in employee_ids:
            record = self._run(employee_id, "reconcile", lambda eid=employee_id: self._reconcile_one(eid, work_date))
            if record is not None:
                created.append(record)

        logger.info("Absence reconciliation for %s: %d absent record(s)", work_date, len(created))
        return created

    def _reconcile_one(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with self._store.atomic() as session:
            if session.attendance.get_for_employee_and_date(employee_id, work_date) is not None:
                return None
            authorized = bool(
                session.requests.find_covering(
                    employee_id, work_date, request_type=RequestType.ABSENCE, status=RequestStatus.APPROVED
                )
            )
            return session.attendance.save(
                AttendanceRecord(
                    employee_id=employee_id,
                    work_date=work_date,
                    state=SessionState.NOT_STARTED,
                    classification=Classification.ABSENT,
                    has_permission=authorized,
                )
            )

    def get_attendance_summary(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        *,
        actor_id: Optional[str] = None,
    ) -> AttendanceSummary:
        """Aggregate the stored records of one employee over [start_date, end_date].

        allowed counts worked days covered by an approved request; unallowed
        counts uncovered checked-out days shorter than the shift, late or not.
        authorized/unauthorized count absent days with or without an approved
        Absence request. Lateness within the grace period is not counted.
        """

        require_date_range(start_date, end_date)
        with self._store.atomic() as session:
            if actor_id is not None:
                actor = session.employees.get_by_id(actor_id)
                if not actor:
                    raise NotFoundError("Employee not found")
                self._authority.require(
                    self._authority.can_view_employee(actor, employee_id),
                    "Not allowed to view this employee's attendance",
                )
            if not session.employees.get_by_id(employee_id):
                raise NotFoundError("Employee not found")
            records = session.attendance.list_for_employee(employee_id, start_date=start_date, end_date=end_date)

        counts = dict.fromkeys(
            (
                "allowed_absence",
                "unallowed_absence",
                "authorized_absence",
                "unauthorized_absence",
                "overtime",
                "late_arrival",
            ),
            0,
        )
        for r in records:
            if r.is_absence:
                counts["authorized_absence" if r.has_permission else "unauthorized_absence"] += 1
                continue
            if r.late_minutes > self._policy.grace_minutes:
                counts["late_arrival"] += 1
            if r.overtime_minutes > 0:
                counts["overtime"] += 1
            if r.has_permission:
                counts["allowed_absence"] += 1
            elif r.check_out is not None and r.total_hours < self._policy.length_hours:
                counts["unallowed_absence"] += 1

        return AttendanceSummary(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            total_days=len(records),
            **counts,
        )
