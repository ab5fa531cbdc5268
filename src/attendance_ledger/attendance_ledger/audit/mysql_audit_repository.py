from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AuditAction
from ..database.mysql_base import db_cursor, dump_json, fetchall, load_json
from .model import AuditEntry
from .repository import AuditRepository


class MySQLAuditRepository(AuditRepository):
    def __init__(self, conn_factory):
        self._conn_factory = conn_factory

    def append(self, entry: AuditEntry) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_entries(
                    entry_id, actor_id, action, entity_type, entity_id,
                    created_at, before_state, after_state, note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.entry_id,
                    entry.actor_id,
                    entry.action.value,
                    entry.entity_type,
                    entry.entity_id,
                    entry.created_at,
                    dump_json(entry.before),
                    dump_json(entry.after),
                    entry.note,
                ),
            )

    def list_entries(
        self,
        *,
        actor_id: Optional[str] = None,
        action: Optional[AuditAction] = None,
        entity_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Sequence[AuditEntry]:
        where = []
        params: list = []
        if actor_id is not None:
            where.append("actor_id=%s")
            params.append(actor_id)
        if action is not None:
            where.append("action=%s")
            params.append(action.value)
        if entity_id is not None:
            where.append("entity_id=%s")
            params.append(entity_id)
        if since is not None:
            where.append("created_at >= %s")
            params.append(since)
        if until is not None:
            where.append("created_at <= %s")
            params.append(until)

        sql = """
            SELECT entry_id, actor_id, action, entity_type, entity_id,
                   created_at, before_state, after_state, note
            FROM audit_entries
        """
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC LIMIT %s OFFSET %s"
        params.extend([int(limit), int(offset)])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                AuditEntry(
                    entry_id=str(r["entry_id"]),
                    actor_id=str(r["actor_id"]),
                    action=AuditAction(r["action"]),
                    entity_type=r["entity_type"],
                    entity_id=str(r["entity_id"]),
                    created_at=r["created_at"],
                    before=load_json(r.get("before_state")),
                    after=load_json(r.get("after_state")),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]
