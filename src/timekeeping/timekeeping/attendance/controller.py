from __future__ import annotations

from flask import Flask, request

from ..common.auth import build_guards, ensure_self_or_admin
from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, respond
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = build_guards(container.auth_service)

    @app.route("/api/attendance/clock-in", methods=["POST"], endpoint="clock_in")
    @guards.token_required
    def clock_in(caller):
        data = json_body()
        record = container.attendance_service.clock_in(caller.user_id, notes=data.get("notes"))
        return respond(record, 201)

    @app.route("/api/attendance/clock-out", methods=["POST"], endpoint="clock_out")
    @guards.token_required
    def clock_out(caller):
        data = json_body()
        record = container.attendance_service.clock_out(caller.user_id, notes=data.get("notes"))
        return respond(record)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="today_attendance_status")
    @guards.token_required
    def today_status(caller):
        status = container.attendance_service.get_today_status(caller.user_id)
        return respond(
            {
                "hasClockedIn": status.has_clocked_in,
                "hasClockedOut": status.has_clocked_out,
                "currentRecord": status.current_record,
            }
        )

    @app.route("/api/attendance/users/<int:user_id>", methods=["GET"], endpoint="user_attendance")
    @guards.token_required
    def user_attendance(user_id: int, caller):
        ensure_self_or_admin(caller, user_id)
        records = container.attendance_service.get_user_attendance(
            user_id,
            start_date=parse_optional_date(request.args.get("start_date")),
            end_date=parse_optional_date(request.args.get("end_date")),
        )
        return respond(records)

    @app.route("/api/attendance", methods=["GET"], endpoint="all_attendance")
    @guards.admin_required
    def all_attendance(caller):
        return respond(container.attendance_service.get_all_attendance())
