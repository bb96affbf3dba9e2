from __future__ import annotations

from flask import Flask

from ..common.auth import build_guards, ensure_self_or_admin
from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, respond
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guards = build_guards(container.auth_service)

    def _required_date(data: dict, key: str):
        if not data.get(key):
            raise ValidationError(f"{key} is required")
        return parse_iso_date(data[key])

    @app.route("/api/leave-requests", methods=["POST"], endpoint="create_leave_request")
    @guards.token_required
    def create_leave_request(caller):
        data = json_body()
        req = container.leave_service.create_leave_request(
            user_id=caller.user_id,
            leave_type=data.get("type", data.get("leave_type")),
            start_date=_required_date(data, "start_date"),
            end_date=_required_date(data, "end_date"),
            reason=data.get("reason"),
        )
        return respond(req, 201)

    @app.route("/api/leave-requests", methods=["GET"], endpoint="all_leave_requests")
    @guards.admin_required
    def all_leave_requests(caller):
        return respond(container.leave_service.get_all_leave_requests())

    @app.route("/api/leave-requests/pending", methods=["GET"], endpoint="pending_leave_requests")
    @guards.admin_required
    def pending_leave_requests(caller):
        return respond(container.leave_service.get_pending_leave_requests())

    @app.route("/api/leave-requests/users/<int:user_id>", methods=["GET"], endpoint="user_leave_requests")
    @guards.token_required
    def user_leave_requests(user_id: int, caller):
        ensure_self_or_admin(caller, user_id)
        return respond(container.leave_service.get_user_leave_requests(user_id))

    @app.route("/api/leave-requests/<int:request_id>/status", methods=["POST"], endpoint="update_leave_request_status")
    @guards.admin_required
    def update_leave_request_status(request_id: int, caller):
        data = json_body()
        if not data.get("status"):
            raise ValidationError("status is required")
        req = container.leave_service.update_leave_request_status(
            request_id=request_id,
            status=data["status"],
            approver_id=caller.user_id,
            rejection_reason=data.get("rejection_reason"),
        )
        return respond(req)

    @app.route("/api/leave-requests/<int:request_id>", methods=["DELETE"], endpoint="delete_leave_request")
    @guards.token_required
    def delete_leave_request(request_id: int, caller):
        return respond(container.leave_service.delete_leave_request(request_id=request_id, user_id=caller.user_id))
