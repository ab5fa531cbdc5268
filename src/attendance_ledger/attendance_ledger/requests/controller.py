from __future__ import annotations

from flask import Flask, g, request

from ..common.http import actor_required, date_arg, int_arg, json_body, respond
from ..container import Container
from ..core.enums import RequestType
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    processor = container.request_processor

    @app.route("/api/requests", methods=["POST"], endpoint="submit_request")
    @actor_required
    def submit_request():
        body = json_body()
        try:
            request_type = RequestType(body.get("requestType") or "")
        except ValueError:
            raise ValidationError("requestType must be one of: " + ", ".join(t.value for t in RequestType))

        start = date_arg(body.get("startDate"), "startDate")
        created = processor.submit(
            employee_id=g.actor_id,
            request_type=request_type,
            start_date=start,
            end_date=date_arg(body.get("endDate"), "endDate", default=start),
            reason=body.get("reason") or "",
            duration_minutes=int_arg(body.get("durationMinutes"), "durationMinutes"),
        )
        return respond(created.to_record(), "Request submitted", 201)

    @app.route("/api/requests/mine", methods=["GET"], endpoint="my_requests")
    @actor_required
    def my_requests():
        items = processor.list_for_employee(actor_id=g.actor_id, employee_id=g.actor_id)
        return respond([r.to_record() for r in items])

    @app.route("/api/requests/pending", methods=["GET"], endpoint="pending_requests")
    @actor_required
    def pending_requests():
        limit = int_arg(request.args.get("limit"), "limit", default=500)
        items = processor.list_pending(actor_id=g.actor_id, limit=limit)
        return respond([r.to_record() for r in items])

    @app.route("/api/requests/<request_id>", methods=["GET"], endpoint="get_request")
    @actor_required
    def get_request(request_id: str):
        return respond(processor.get_request(actor_id=g.actor_id, request_id=request_id).to_record())

    @app.route("/api/requests/<request_id>/approve", methods=["POST"], endpoint="approve_request")
    @actor_required
    def approve_request(request_id: str):
        note = json_body().get("note") or ""
        approved = processor.approve(actor_id=g.actor_id, request_id=request_id, note=note)
        return respond(approved.to_record(), "Request approved")

    @app.route("/api/requests/<request_id>/reject", methods=["POST"], endpoint="reject_request")
    @actor_required
    def reject_request(request_id: str):
        note = json_body().get("note") or ""
        rejected = processor.reject(actor_id=g.actor_id, request_id=request_id, note=note)
        return respond(rejected.to_record(), "Request rejected")

    @app.route("/api/requests/<request_id>/revoke", methods=["POST"], endpoint="revoke_approval")
    @actor_required
    def revoke_approval(request_id: str):
        note = json_body().get("note") or ""
        revoked = processor.revoke(actor_id=g.actor_id, request_id=request_id, note=note)
        return respond(revoked.to_record(), "Approval revoked")
