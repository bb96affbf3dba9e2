from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Callable

from flask import request

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.model import Caller
from ..users.service import AuthService


def bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("missing token")
    return token.strip()


def ensure_self_or_admin(caller: Caller, user_id: int) -> None:
    if caller.user_id != int(user_id) and not caller.is_admin:
        raise AuthorizationError("you can only access your own records")


@dataclass(frozen=True)
class Guards:
    token_required: Callable
    admin_required: Callable


def build_guards(auth_service: AuthService) -> Guards:
    """Route decorators that resolve the bearer token into a ``caller`` kwarg."""

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            kwargs["caller"] = auth_service.resolve_caller(bearer_token())
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            caller = auth_service.resolve_caller(bearer_token())
            if not caller.is_admin:
                raise AuthorizationError("admin role required")
            kwargs["caller"] = caller
            return view(*args, **kwargs)

        return wrapper

    return Guards(token_required=token_required, admin_required=admin_required)
