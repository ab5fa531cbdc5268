from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import Classification, SessionState
from ..core.exceptions import ConcurrentModification
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    employee_id, work_date, state, classification, check_in, check_out,
    break_started_at, break_seconds, total_hours, late_minutes,
    overtime_minutes, early_leave_minutes, has_permission, note, version
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        state=SessionState(r["state"]),
        classification=Classification(r["classification"]),
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        break_started_at=r.get("break_started_at"),
        break_seconds=int(r.get("break_seconds") or 0),
        total_hours=to_decimal(r.get("total_hours")),
        late_minutes=int(r.get("late_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        early_leave_minutes=int(r.get("early_leave_minutes") or 0),
        has_permission=bool(r.get("has_permission")),
        note=r.get("note"),
        version=int(r["version"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_employee(self, employee_id: str, *, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date
                """,
                (employee_id, start_date, end_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE employee_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        values = (
            record.state.value,
            record.classification.value,
            record.check_in,
            record.check_out,
            record.break_started_at,
            int(record.break_seconds),
            record.total_hours,
            int(record.late_minutes),
            int(record.overtime_minutes),
            int(record.early_leave_minutes),
            int(bool(record.has_permission)),
            record.note,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if record.version == 0:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_records(
                            state, classification, check_in, check_out, break_started_at,
                            break_seconds, total_hours, late_minutes, overtime_minutes,
                            early_leave_minutes, has_permission, note,
                            employee_id, work_date, version
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                        """,
                        values + (record.employee_id, record.work_date),
                    )
                except mysql.connector.IntegrityError as exc:
                    raise ConcurrentModification(
                        f"Attendance for {record.employee_id} on {record.work_date} was created concurrently"
                    ) from exc
            else:
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET state=%s, classification=%s, check_in=%s, check_out=%s, break_started_at=%s,
                        break_seconds=%s, total_hours=%s, late_minutes=%s, overtime_minutes=%s,
                        early_leave_minutes=%s, has_permission=%s, note=%s, version=version+1
                    WHERE employee_id=%s AND work_date=%s AND version=%s
                    """,
                    values + (record.employee_id, record.work_date, int(record.version)),
                )
                if cur.rowcount == 0:
                    raise ConcurrentModification(
                        f"Attendance for {record.employee_id} on {record.work_date} was modified concurrently"
                    )
        return record.with_changes(version=record.version + 1)
