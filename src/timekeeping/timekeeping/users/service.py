from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Sequence

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_email, require_enum, require_min_length, require_non_empty
from ..core.constants import DEFAULT_TOKEN_TTL_HOURS, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import Caller, LoginResult, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

_TOKEN_ALGORITHM = "HS256"


class AuthService:
    """Use case: authenticate users and resolve bearer tokens into callers."""

    def __init__(self, users: UserRepository, *, secret_key: str, token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS):
        if not secret_key:
            raise ValueError("secret_key is required to sign tokens")
        self._users = users
        self._secret_key = secret_key
        self._token_ttl = timedelta(hours=int(token_ttl_hours))

    def authenticate(self, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email((email or "").strip().lower())

        try:
            ok = bool(user) and check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.warning("login failed for %s", email)
            raise AuthenticationError("invalid credentials")
        if not user.is_active:
            logger.warning("login refused for inactive user %s", user.user_id)
            raise AuthenticationError("account is inactive")

        logger.info("user %s logged in", user.user_id)
        return LoginResult(user=user, token=self.issue_token(user))

    def issue_token(self, user: User, *, now: Optional[datetime] = None) -> str:
        issued = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(user.user_id),
            "role": user.role.value,
            "iat": issued,
            "exp": issued + self._token_ttl,
        }
        return jwt.encode(claims, self._secret_key, algorithm=_TOKEN_ALGORITHM)

    def resolve_caller(self, token: str) -> Caller:
        if not token:
            raise AuthenticationError("missing token")
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[_TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("token expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("invalid token")

        try:
            user_id = int(claims["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("invalid token")

        # Role and active flag come from the store, so demotions and
        # deactivations apply to tokens already handed out.
        user = self._users.get_by_id(user_id)
        if not user or not user.is_active:
            raise AuthenticationError("invalid token")
        return Caller(user_id=user.user_id, role=user.role)


class UserService:
    """Use case: manage users (admin) and answer identity lookups for the core."""

    def __init__(self, users: UserRepository):
        self._users = users

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get_by_id(int(user_id))

    @staticmethod
    def is_active(user: User) -> bool:
        return bool(user.is_active)

    def get_user(self, user_id: int) -> Optional[User]:
        return self.find_user_by_id(user_id)

    def list_users(self) -> Sequence[User]:
        return list(self._users.list_all())

    def create_user(
        self,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role | str = Role.EMPLOYEE,
        employee_id: Optional[str] = None,
        department: Optional[str] = None,
        hire_date: Optional[date] = None,
    ) -> User:
        email = require_email(email)
        require_min_length(password, "password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "first name")
        last_name = require_non_empty(last_name, "last name")
        role = require_enum(Role, role, "role")

        user_id = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            employee_id=optional_text(employee_id),
            department=optional_text(department),
            hire_date=hire_date,
        )
        logger.info("user %s created (%s, %s)", user_id, email, role.value)
        return self._require(user_id)

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> User:
        """Partial update; keys absent from ``changes`` are left untouched."""

        clean: dict[str, Any] = {}
        if "email" in changes:
            clean["email"] = require_email(changes["email"])
        if "first_name" in changes:
            clean["first_name"] = require_non_empty(changes["first_name"], "first name")
        if "last_name" in changes:
            clean["last_name"] = require_non_empty(changes["last_name"], "last name")
        if "role" in changes:
            clean["role"] = require_enum(Role, changes["role"], "role")
        for key in ("employee_id", "department"):
            if key in changes:
                clean[key] = optional_text(changes[key])
        if "hire_date" in changes:
            clean["hire_date"] = changes["hire_date"]
        if "is_active" in changes:
            if not isinstance(changes["is_active"], bool):
                raise ValidationError("is_active must be a boolean")
            clean["is_active"] = changes["is_active"]

        if not self._users.update_user(int(user_id), clean):
            raise NotFoundError("user not found")
        logger.info("user %s updated (%s)", user_id, ", ".join(sorted(clean)) or "no changes")
        return self._require(user_id)

    def deactivate_user(self, user_id: int) -> dict:
        if not self._users.set_active(int(user_id), is_active=False):
            raise NotFoundError("user not found")
        logger.info("user %s deactivated", user_id)
        return {"success": True}

    def _require(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("user not found")
        return user
