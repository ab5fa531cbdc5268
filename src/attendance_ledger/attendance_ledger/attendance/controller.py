from __future__ import annotations

from flask import Flask, g, request

from ..common.http import actor_required, date_arg, int_arg, json_body, respond
from ..container import Container
from ..core.constants import DEFAULT_HISTORY_LIMIT


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @actor_required
    def check_in():
        record = service.check_in(g.actor_id)
        return respond(record.to_record(), "Checked in")

    @app.route("/api/attendance/break", methods=["POST"], endpoint="take_break")
    @actor_required
    def take_break():
        record = service.take_break(g.actor_id)
        return respond(record.to_record(), "Break started")

    @app.route("/api/attendance/resume", methods=["POST"], endpoint="resume")
    @actor_required
    def resume():
        record = service.resume(g.actor_id)
        return respond(record.to_record(), "Resumed")

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="check_out")
    @actor_required
    def check_out():
        record = service.check_out(g.actor_id)
        return respond(record.to_record(), "Checked out")

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @actor_required
    def today():
        now = container.clock()
        record = service.get_today_record(g.actor_id, now.date())
        return respond(
            {
                "state": service.get_state(g.actor_id, now=now).value,
                "record": record.to_record() if record else None,
            }
        )

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @actor_required
    def history():
        limit = int_arg(request.args.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT)
        records = service.get_history(g.actor_id, limit=limit)
        return respond([r.to_record() for r in records])

    @app.route("/api/employees/<employee_id>/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @actor_required
    def summary(employee_id: str):
        start = date_arg(request.args.get("start"), "start")
        end = date_arg(request.args.get("end"), "end")
        result = service.get_attendance_summary(employee_id, start, end, actor_id=g.actor_id)
        return respond(result.to_record())

    @app.route("/api/attendance/reconcile", methods=["POST"], endpoint="reconcile_absences")
    @actor_required
    def reconcile():
        body = json_body()
        work_date = date_arg(body.get("date"), "date", default=container.clock().date())
        created = service.reconcile_absences(work_date, actor_id=g.actor_id)
        return respond([r.to_record() for r in created], f"{len(created)} absence record(s) written")
