from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.timekeeping.timekeeping.attendance.model import AttendanceRecord, AttendanceReportRow
from src.timekeeping.timekeeping.container import assemble
from src.timekeeping.timekeeping.core.enums import LeaveStatus, LeaveType, Role
from src.timekeeping.timekeeping.core.exceptions import ConflictError
from src.timekeeping.timekeeping.leaves.model import LeaveRequest
from src.timekeeping.timekeeping.users.model import User

SECRET = "test-secret"


class InMemoryUsers:
    def __init__(self):
        self.users_by_id: dict[int, User] = {}
        self._id = 0

    def add(
        self,
        email: str,
        *,
        password: str = "secret123",
        role: Role = Role.EMPLOYEE,
        first_name: str = "Test",
        last_name: str = "User",
        department: Optional[str] = None,
        is_active: bool = True,
    ) -> User:
        self._id += 1
        user = User(
            user_id=self._id,
            email=email,
            password_hash=generate_password_hash(password),
            first_name=first_name,
            last_name=last_name,
            role=role,
            department=department,
            is_active=is_active,
        )
        self.users_by_id[user.user_id] = user
        return user

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users_by_id.values() if u.email == email), None)

    def create_user(self, *, email, password_hash, first_name, last_name, role, employee_id, department, hire_date) -> int:
        if self.get_by_email(email):
            raise ConflictError("email already registered")
        self._id += 1
        self.users_by_id[self._id] = User(
            user_id=self._id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            employee_id=employee_id,
            department=department,
            hire_date=hire_date,
        )
        return self._id

    def update_user(self, user_id: int, changes: Mapping[str, Any]) -> bool:
        user = self.users_by_id.get(user_id)
        if not user:
            return False
        other = self.get_by_email(changes.get("email", user.email))
        if other and other.user_id != user_id:
            raise ConflictError("email already registered")
        self.users_by_id[user_id] = replace(user, **changes)
        return True

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self.update_user(user_id, {"is_active": is_active})

    def list_all(self):
        return sorted(self.users_by_id.values(), key=lambda u: u.user_id)


class InMemoryAttendance:
    """Mirrors the (user_id, work_date) unique key and the conditional clock-out update."""

    def __init__(self, users: InMemoryUsers):
        self._users = users
        self.records: dict[int, AttendanceRecord] = {}
        self._id = 0

    def add(
        self,
        user_id: int,
        clock_in: datetime,
        clock_out: Optional[datetime] = None,
        notes=None,
        *,
        work_date: Optional[date] = None,
    ) -> AttendanceRecord:
        self._id += 1
        hours = (clock_out - clock_in).total_seconds() / 3600 if clock_out else None
        rec = AttendanceRecord(
            attendance_id=self._id,
            user_id=user_id,
            work_date=work_date or clock_in.date(),
            clock_in=clock_in,
            clock_out=clock_out,
            total_hours=hours,
            notes=notes,
        )
        self.records[rec.attendance_id] = rec
        return rec

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.records.get(attendance_id)

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        return next((r for r in self.records.values() if r.user_id == user_id and r.work_date == work_date), None)

    def create_clock_in(self, *, user_id: int, work_date: date, clock_in: datetime, notes=None) -> Optional[int]:
        if self.get_for_user_and_date(user_id, work_date):
            return None
        return self.add(user_id, clock_in, notes=notes, work_date=work_date).attendance_id

    def record_clock_out(self, *, attendance_id: int, clock_out: datetime, total_hours: float, notes=None) -> bool:
        rec = self.records.get(attendance_id)
        if not rec or rec.clock_out is not None:
            return False
        self.records[attendance_id] = replace(
            rec,
            clock_out=clock_out,
            total_hours=total_hours,
            notes=notes if notes is not None else rec.notes,
        )
        return True

    def list_for_user(self, user_id: int, *, start_date=None, end_date=None):
        items = [
            r for r in self.records.values()
            if r.user_id == user_id
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        return sorted(items, key=lambda r: (r.work_date, r.attendance_id), reverse=True)

    def list_all(self):
        return sorted(self.records.values(), key=lambda r: (r.work_date, r.attendance_id), reverse=True)

    def get_report_rows(self, *, start_date, end_date, department=None, user_id=None):
        rows = []
        for r in self.list_all():
            u = self._users.get_by_id(r.user_id)
            if not (start_date <= r.work_date <= end_date):
                continue
            if department is not None and u.department != department:
                continue
            if user_id is not None and r.user_id != user_id:
                continue
            rows.append(
                AttendanceReportRow(
                    user_id=u.user_id,
                    first_name=u.first_name,
                    last_name=u.last_name,
                    department=u.department,
                    work_date=r.work_date,
                    clock_in=r.clock_in,
                    clock_out=r.clock_out,
                    total_hours=r.total_hours,
                )
            )
        return rows


class InMemoryLeaves:
    def __init__(self):
        self.requests: dict[int, LeaveRequest] = {}
        self._id = 0
        self._clock = datetime(2024, 1, 1, 8, 0)

    def add(self, user_id: int, start: date, end: date, *, leave_type=LeaveType.VACATION, status=LeaveStatus.PENDING) -> LeaveRequest:
        request_id = self.create_leave(user_id=user_id, leave_type=leave_type, start_date=start, end_date=end, reason="r")
        if status != LeaveStatus.PENDING:
            self.requests[request_id] = replace(self.requests[request_id], status=status)
        return self.requests[request_id]

    def create_leave(self, *, user_id, leave_type, start_date, end_date, reason) -> int:
        self._id += 1
        self._clock += timedelta(minutes=1)
        self.requests[self._id] = LeaveRequest(
            request_id=self._id,
            user_id=user_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=self._clock,
        )
        return self._id

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        return self.requests.get(request_id)

    def get_for_owner(self, request_id: int, user_id: int) -> Optional[LeaveRequest]:
        req = self.requests.get(request_id)
        return req if req and req.user_id == user_id else None

    def list_leave_requests(self, *, status=None, user_id=None, overlapping_start=None, overlapping_end=None):
        items = [
            r for r in self.requests.values()
            if (status is None or r.status == status)
            and (user_id is None or r.user_id == user_id)
            and (overlapping_start is None or r.end_date >= overlapping_start)
            and (overlapping_end is None or r.start_date <= overlapping_end)
        ]
        return sorted(items, key=lambda r: (r.created_at, r.request_id), reverse=True)

    def decide_leave(self, *, request_id, status, decided_by, approved_at, rejection_reason=None) -> bool:
        req = self.requests.get(request_id)
        if not req or req.status != LeaveStatus.PENDING:
            return False
        self.requests[request_id] = replace(
            req,
            status=status,
            approved_by=decided_by,
            approved_at=approved_at,
            rejection_reason=rejection_reason,
        )
        return True

    def delete_pending(self, request_id: int, user_id: int) -> bool:
        req = self.get_for_owner(request_id, user_id)
        if not req or req.status != LeaveStatus.PENDING:
            return False
        del self.requests[request_id]
        return True


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 3, 4, 8, 55, tzinfo=timezone.utc)


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def attendance(users) -> InMemoryAttendance:
    return InMemoryAttendance(users)


@pytest.fixture
def leaves() -> InMemoryLeaves:
    return InMemoryLeaves()


@pytest.fixture
def container(users, attendance, leaves):
    return assemble(users_repo=users, attendance_repo=attendance, leaves_repo=leaves, secret_key=SECRET)


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.timekeeping.timekeeping.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()
