from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..authority import model as auth
from ..authority.service import RoleAuthorityModel
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import AuditAction
from ..core.exceptions import NotFoundError
from ..store import LedgerStore, StoreSession
from .model import AuditEntry


def record_action(
    session: StoreSession,
    *,
    actor_id: str,
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    before: Optional[Dict[str, Any]],
    after: Optional[Dict[str, Any]],
    now: datetime,
    note: Optional[str] = None,
) -> AuditEntry:
    """Append an audit entry inside the caller's transaction."""

    entry = AuditEntry(
        entry_id=str(uuid.uuid4()),
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        created_at=now,
        before=before,
        after=after,
        note=note,
    )
    session.audit.append(entry)
    return entry


class AuditTrailService:
    def __init__(self, store: LedgerStore, authority: RoleAuthorityModel):
        self._store = store
        self._authority = authority

    def list_entries(
        self,
        *,
        actor_id: str,
        performer_id: Optional[str] = None,
        action: Optional[AuditAction] = None,
        entity_id: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: int = DEFAULT_AUDIT_LIMIT,
        offset: int = 0,
    ) -> Sequence[AuditEntry]:
        with self._store.atomic() as session:
            actor = session.employees.get_by_id(actor_id)
            if not actor:
                raise NotFoundError("Employee not found")
            self._authority.require(
                self._authority.has_authority(actor, auth.VIEW_AUDIT_TRAIL),
                "Only Admins can view the audit trail",
            )
            return session.audit.list_entries(
                actor_id=performer_id,
                action=action,
                entity_id=entity_id,
                since=since,
                until=until,
                limit=int(limit),
                offset=int(offset),
            )
