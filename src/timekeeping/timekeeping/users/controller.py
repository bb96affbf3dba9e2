from __future__ import annotations

from datetime import datetime, timezone

from flask import Flask

from ..common.auth import build_guards
from ..common.datetime_utils import parse_optional_date
from ..common.http import json_body, respond
from ..common.validators import require_int
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container

_USER_FIELDS = ("email", "first_name", "last_name", "role", "employee_id", "department", "hire_date", "is_active")


def register(app: Flask, container: Container) -> None:
    guards = build_guards(container.auth_service)

    @app.route("/api/health", methods=["GET"], endpoint="healthcheck")
    def healthcheck():
        return respond({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        result = container.auth_service.authenticate(str(data.get("email") or ""), str(data.get("password") or ""))
        return respond({"user": result.user, "token": result.token})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @guards.token_required
    def logout(caller):
        # Tokens are stateless; the client drops its copy.
        return respond({"success": True})

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @guards.admin_required
    def list_users(caller):
        return respond(container.user_service.list_users())

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @guards.admin_required
    def create_user(caller):
        data = json_body()
        user = container.user_service.create_user(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            role=data.get("role", "employee"),
            employee_id=data.get("employee_id"),
            department=data.get("department"),
            hire_date=parse_optional_date(data.get("hire_date")),
        )
        return respond(user, 201)

    @app.route("/api/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @guards.admin_required
    def get_user(user_id: int, caller):
        user = container.user_service.get_user(user_id)
        if not user:
            raise NotFoundError("user not found")
        return respond(user)

    @app.route("/api/users/<int:user_id>", methods=["PATCH"], endpoint="update_user")
    @guards.admin_required
    def update_user(user_id: int, caller):
        data = json_body()
        unknown = sorted(set(data) - set(_USER_FIELDS) - {"id"})
        if unknown:
            raise ValidationError(f"unknown fields: {', '.join(unknown)}")
        if "id" in data and require_int(data["id"], "id") != user_id:
            raise ValidationError("id in body does not match the URL")

        changes = {k: data[k] for k in _USER_FIELDS if k in data}
        if "hire_date" in changes:
            changes["hire_date"] = parse_optional_date(changes["hire_date"])
        return respond(container.user_service.update_user(user_id, changes))

    @app.route("/api/users/<int:user_id>", methods=["DELETE"], endpoint="deactivate_user")
    @guards.admin_required
    def deactivate_user(user_id: int, caller):
        return respond(container.user_service.deactivate_user(user_id))
