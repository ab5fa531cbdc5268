from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import EmployeeStatus, Role
from ..core.exceptions import ConcurrentModification
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json, to_decimal
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, name, email, role, authorities, status,
    allowed_absence_days, total_absence_days,
    allowed_late_early_hours, used_late_early_hours, version
"""


def _to_employee(row: Dict[str, Any]) -> Employee:
    authorities = load_json(row.get("authorities"))
    return Employee(
        employee_id=str(row["employee_id"]),
        name=row["name"],
        email=row.get("email"),
        role=Role(row["role"]),
        authorities=frozenset(authorities) if authorities is not None else None,
        status=EmployeeStatus(row["status"]),
        allowed_absence_days=int(row["allowed_absence_days"]),
        total_absence_days=int(row["total_absence_days"]),
        allowed_late_early_hours=to_decimal(row["allowed_late_early_hours"]),
        used_late_early_hours=to_decimal(row["used_late_early_hours"]),
        version=int(row["version"]),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_active(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE status=%s ORDER BY employee_id",
                (EmployeeStatus.ACTIVE.value,),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def save(self, employee: Employee) -> Employee:
        authorities = sorted(employee.authorities) if employee.authorities is not None else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET name=%s, email=%s, role=%s, authorities=%s, status=%s,
                    allowed_absence_days=%s, total_absence_days=%s,
                    allowed_late_early_hours=%s, used_late_early_hours=%s,
                    version=version+1
                WHERE employee_id=%s AND version=%s
                """,
                (
                    employee.name,
                    employee.email,
                    employee.role.value,
                    dump_json(authorities),
                    employee.status.value,
                    int(employee.allowed_absence_days),
                    int(employee.total_absence_days),
                    employee.allowed_late_early_hours,
                    employee.used_late_early_hours,
                    employee.employee_id,
                    int(employee.version),
                ),
            )
            if cur.rowcount == 0:
                raise ConcurrentModification(f"Employee {employee.employee_id} was modified concurrently")
        return employee.with_changes(version=employee.version + 1)
