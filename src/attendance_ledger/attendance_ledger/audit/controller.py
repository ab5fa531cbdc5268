from __future__ import annotations

from flask import Flask, g, request

from ..common.http import actor_required, datetime_arg, int_arg, respond
from ..container import Container
from ..core.constants import DEFAULT_AUDIT_LIMIT
from ..core.enums import AuditAction
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.audit_service

    @app.route("/api/audit", methods=["GET"], endpoint="audit_trail")
    @actor_required
    def audit_trail():
        action = request.args.get("action")
        if action:
            try:
                action = AuditAction(action)
            except ValueError:
                raise ValidationError(f"Unknown action: {action}")
        entries = service.list_entries(
            actor_id=g.actor_id,
            performer_id=request.args.get("actorId") or None,
            action=action or None,
            entity_id=request.args.get("entityId") or None,
            since=datetime_arg(request.args.get("since"), "since"),
            until=datetime_arg(request.args.get("until"), "until"),
            limit=int_arg(request.args.get("limit"), "limit", default=DEFAULT_AUDIT_LIMIT),
            offset=int_arg(request.args.get("offset"), "offset", default=0),
        )
        return respond([e.to_record() for e in entries])
