from __future__ import annotations

import json
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


class _ScopedConnection:
    """Connection handed to repositories inside a TransactionScope.

    commit/rollback/close are left to the scope, so several repositories can
    write through `db_cursor` and still land in a single transaction.
    """

    def __init__(self, conn):
        self._conn = conn

    def cursor(self, **kwargs):
        return self._conn.cursor(**kwargs)

    def commit(self) -> None:
        pass

    def rollback(self) -> None:
        pass

    def close(self) -> None:
        pass


class TransactionScope:
    """Connection factory bound to one open transaction.

    Use as a context manager: commits when the block exits normally, rolls
    back when it raises.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._conn = None

    def connect(self) -> _ScopedConnection:
        if self._conn is None:
            raise RuntimeError("TransactionScope is not open")
        return _ScopedConnection(self._conn)

    def __enter__(self) -> "TransactionScope":
        self._conn = self._conn_factory.connect()
        self._conn.start_transaction()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()
            self._conn = None


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any, default: str = "0.00") -> Decimal:
    if value is None:
        return Decimal(default)
    return value if isinstance(value, Decimal) else Decimal(str(value))


def dump_json(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value, sort_keys=True, default=str)


def load_json(value: Any) -> Any:
    """JSON columns come back as str (pure connector) or bytes (C extension)."""

    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value
