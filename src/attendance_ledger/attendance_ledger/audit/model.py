from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import AuditAction


@dataclass(frozen=True)
class AuditEntry:
    """Immutable before/after snapshot of one privileged action."""

    entry_id: str
    actor_id: str
    action: AuditAction
    entity_type: str
    entity_id: str
    created_at: datetime
    before: Optional[Dict[str, Any]] = None
    after: Optional[Dict[str, Any]] = None
    note: Optional[str] = field(default=None)

    def to_record(self) -> dict:
        return {
            "id": self.entry_id,
            "actorId": self.actor_id,
            "action": self.action.value,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "timestamp": self.created_at.isoformat(),
            "before": self.before,
            "after": self.after,
            "note": self.note,
        }
