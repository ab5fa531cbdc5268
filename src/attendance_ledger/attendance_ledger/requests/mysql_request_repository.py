from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import RequestStatus, RequestType
from ..core.exceptions import ConcurrentModification
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LeaveRequest
from .repository import RequestRepository

_COLUMNS = """
    request_id, employee_id, request_type, start_date, end_date, duration_minutes,
    reason, status, created_at, granted_days, granted_hours, reviewer_id,
    reviewed_at, review_note, revoked_by, revoked_at
"""


def _to_request(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=str(r["request_id"]),
        employee_id=str(r["employee_id"]),
        request_type=RequestType(r["request_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        duration_minutes=r.get("duration_minutes"),
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        granted_days=r.get("granted_days"),
        granted_hours=r.get("granted_hours"),
        reviewer_id=r.get("reviewer_id"),
        reviewed_at=r.get("reviewed_at"),
        review_note=r.get("review_note"),
        revoked_by=r.get("revoked_by"),
        revoked_at=r.get("revoked_at"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def get(self, request_id: str) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (request_id,))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def create(self, request: LeaveRequest) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    request_id, employee_id, request_type, start_date, end_date,
                    duration_minutes, reason, status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.request_id,
                    request.employee_id,
                    request.request_type.value,
                    request.start_date,
                    request.end_date,
                    request.duration_minutes,
                    request.reason,
                    request.status.value,
                    request.created_at,
                ),
            )
        return request

    def save(self, request: LeaveRequest, *, expected_status: RequestStatus) -> LeaveRequest:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, granted_days=%s, granted_hours=%s, reviewer_id=%s,
                    reviewed_at=%s, review_note=%s, revoked_by=%s, revoked_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    request.status.value,
                    request.granted_days,
                    request.granted_hours,
                    request.reviewer_id,
                    request.reviewed_at,
                    request.review_note,
                    request.revoked_by,
                    request.revoked_at,
                    request.request_id,
                    expected_status.value,
                ),
            )
            if cur.rowcount == 0:
                raise ConcurrentModification(f"Request {request.request_id} is no longer {expected_status.value}")
        return request

    def list_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        where = []
        params: list = []
        if employee_id is not None:
            where.append("employee_id=%s")
            params.append(employee_id)
        if status is not None:
            where.append("status=%s")
            params.append(status.value)

        sql = f"SELECT {_COLUMNS} FROM leave_requests"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_request(r) for r in fetchall(cur)]

    def find_covering(
        self,
        employee_id: str,
        work_date: date,
        *,
        request_type: RequestType,
        status: RequestStatus,
    ) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM leave_requests
                WHERE employee_id=%s AND request_type=%s AND status=%s
                  AND start_date <= %s AND end_date >= %s
                ORDER BY created_at
                """,
                (employee_id, request_type.value, status.value, work_date, work_date),
            )
            return [_to_request(r) for r in fetchall(cur)]
