from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from ..core.constants import DEFAULT_ALLOWED_ABSENCE_DAYS, DEFAULT_ALLOWED_LATE_EARLY_HOURS
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for the schema file (handles ';' inside quotes, skips -- comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for line in sql.splitlines(keepends=True):
        if not in_single and not in_double and line.lstrip().startswith("--"):
            continue
        for ch in line:
            if escape:
                buf.append(ch)
                escape = False
                continue

            if ch == "\\":
                buf.append(ch)
                escape = True
                continue

            if ch == "'" and not in_double:
                in_single = not in_single
            elif ch == '"' and not in_single:
                in_double = not in_double
            elif ch == ";" and not in_single and not in_double:
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                continue

            buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> int:
    """Create the database and apply schema.sql (idempotent: CREATE TABLE IF NOT EXISTS).

    Returns the number of statements executed.
    """

    ensure_database_exists(conn_factory)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = conn_factory.connect()
    count = 0
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    logger.info("Applied %d schema statement(s) to %s", count, conn_factory.config.database)
    return count


DEMO_EMPLOYEES = (
    ("admin", "Admin Demo", "ADMIN", "admin@example.com"),
    ("manager", "Manager Demo", "MANAGER", "manager@example.com"),
    ("employee", "Employee Demo", "EMPLOYEE", "employee@example.com"),
)


def ensure_demo_employees(conn_factory: DatabaseConnection) -> None:
    """Insert one employee per role with default allowances; existing rows are left alone."""

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for employee_id, name, role, email in DEMO_EMPLOYEES:
            cur.execute(
                """
                INSERT IGNORE INTO employees(
                    employee_id, name, email, role, allowed_absence_days, allowed_late_early_hours
                )
                VALUES(%s, %s, %s, %s, %s, %s)
                """,
                (employee_id, name, email, role, DEFAULT_ALLOWED_ABSENCE_DAYS, DEFAULT_ALLOWED_LATE_EARLY_HOURS),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo employees ready: %s", ", ".join(e[0] for e in DEMO_EMPLOYEES))
