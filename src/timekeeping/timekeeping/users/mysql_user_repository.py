from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import Role
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import User
from .repository import UserRepository

_COLUMNS = """
    user_id, email, password_hash, first_name, last_name, role,
    employee_id, department, hire_date, is_active, created_at, updated_at
"""

# Whitelist of columns a partial update may touch.
_UPDATABLE = ("email", "first_name", "last_name", "role", "employee_id", "department", "hire_date", "is_active")


def _row_to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        role=Role(row["role"]),
        employee_id=row.get("employee_id"),
        department=row.get("department"),
        hire_date=row.get("hire_date"),
        is_active=bool(row.get("is_active", True)),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE user_id=%s", (int(user_id),))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def create_user(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Role,
        employee_id: Optional[str],
        department: Optional[str],
        hire_date: Optional[date],
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO users(email, password_hash, first_name, last_name, role,
                                      employee_id, department, hire_date, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (email, password_hash, first_name, last_name, role.value, employee_id, department, hire_date),
                )
                return int(cur.lastrowid)
        except IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError("email already registered") from exc
            raise

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> bool:
        assignments: list[str] = []
        params: list[object] = []
        for column in _UPDATABLE:
            if column not in changes:
                continue
            value = changes[column]
            if isinstance(value, Role):
                value = value.value
            if column == "is_active":
                value = 1 if value else 0
            assignments.append(f"{column}=%s")
            params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT user_id FROM users WHERE user_id=%s", (int(user_id),))
            if not fetchone(cur):
                return False
            if not assignments:
                return True
            try:
                cur.execute(
                    f"UPDATE users SET {', '.join(assignments)}, updated_at=CURRENT_TIMESTAMP WHERE user_id=%s",
                    tuple(params + [int(user_id)]),
                )
            except IntegrityError as exc:
                if is_duplicate_key(exc):
                    raise ConflictError("email already registered") from exc
                raise
            return True

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET is_active=%s, updated_at=CURRENT_TIMESTAMP WHERE user_id=%s",
                (1 if is_active else 0, int(user_id)),
            )
            # rowcount is 0 when the flag already had this value; re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute("SELECT user_id FROM users WHERE user_id=%s", (int(user_id),))
            return fetchone(cur) is not None

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id ASC")
            return [_row_to_user(r) for r in fetchall(cur)]
