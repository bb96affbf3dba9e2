from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: plain data object (no DB access code). Users are never hard-deleted;
    ``is_active`` is the soft-delete flag.
    """

    user_id: int
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role
    employee_id: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class Caller:
    """Identity resolved from a bearer token and handed to every operation."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True)
class LoginResult:
    user: User
    token: str
