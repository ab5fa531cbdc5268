from __future__ import annotations

from flask import Flask, g

from ..common.http import actor_required, json_body, respond
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="get_employee")
    @actor_required
    def get_employee(employee_id: str):
        return respond(service.get_employee(actor_id=g.actor_id, employee_id=employee_id).to_record())

    @app.route("/api/employees/<employee_id>/balance", methods=["GET"], endpoint="get_balance")
    @actor_required
    def get_balance(employee_id: str):
        return respond(service.get_balance_snapshot(employee_id, actor_id=g.actor_id).to_record())

    @app.route("/api/employees/<employee_id>/allowances", methods=["PUT"], endpoint="set_allowances")
    @actor_required
    def set_allowances(employee_id: str):
        body = json_body()
        updated = service.set_allowances(
            actor_id=g.actor_id,
            employee_id=employee_id,
            allowed_absence_days=body.get("allowedAbsenceDays"),
            allowed_late_early_hours=body.get("totalLateEarlyHours"),
        )
        return respond(updated.to_record(), "Allowances updated")

    @app.route("/api/employees/<employee_id>/authorities", methods=["PUT"], endpoint="set_authorities")
    @actor_required
    def set_authorities(employee_id: str):
        body = json_body()
        if "authorities" not in body:
            raise ValidationError("authorities is required (null restores the role default)")
        authorities = body["authorities"]
        if authorities is not None and not isinstance(authorities, list):
            raise ValidationError("authorities must be a list of strings or null")
        updated = service.set_authorities(actor_id=g.actor_id, employee_id=employee_id, authorities=authorities)
        return respond(updated.to_record(), "Authorities updated")

    @app.route("/api/employees/<employee_id>/role", methods=["PUT"], endpoint="change_role")
    @actor_required
    def change_role(employee_id: str):
        role = json_body().get("role") or ""
        updated = service.change_role(actor_id=g.actor_id, employee_id=employee_id, role=str(role).upper())
        return respond(updated.to_record(), "Role updated")
