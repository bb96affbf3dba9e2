from __future__ import annotations

from flask import Flask, request

from ..common.auth import build_guards
from ..common.datetime_utils import parse_iso_date, parse_optional_date
from ..common.http import respond
from ..common.validators import optional_text, require_int
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = build_guards(container.auth_service)

    def _required_date(key: str):
        value = request.args.get(key)
        if not value:
            raise ValidationError(f"{key} is required")
        return parse_iso_date(value)

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="attendance_report")
    @guards.admin_required
    def attendance_report(caller):
        user_id = request.args.get("user_id")
        report = container.report_service.attendance_report(
            start=_required_date("start_date"),
            end=_required_date("end_date"),
            department=optional_text(request.args.get("department")),
            user_id=require_int(user_id, "user_id") if user_id else None,
        )
        return respond(report)

    @app.route("/api/reports/departments", methods=["GET"], endpoint="department_summary")
    @guards.admin_required
    def department_summary(caller):
        return respond(
            container.report_service.department_summary(
                start=_required_date("start_date"),
                end=_required_date("end_date"),
            )
        )

    @app.route("/api/reports/leave", methods=["GET"], endpoint="leave_summary")
    @guards.admin_required
    def leave_summary(caller):
        return respond(
            container.report_service.leave_summary(
                start=parse_optional_date(request.args.get("start_date")),
                end=parse_optional_date(request.args.get("end_date")),
            )
        )
