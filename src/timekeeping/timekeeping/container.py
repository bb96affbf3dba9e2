from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import load_timezone, parse_hhmm
from .core.constants import DEFAULT_TIMEZONE, DEFAULT_TOKEN_TTL_HOURS, DEFAULT_WORKDAY_END, DEFAULT_WORKDAY_START
from .database.connection import DBConfig, DatabaseConnection
from .leaves.mysql_leave_repository import MySQLLeaveRequestRepository
from .leaves.repository import LeaveRequestRepository
from .leaves.service import LeaveService
from .reports.rules.base import PunctualityRule
from .reports.rules.fixed_hours import FixedHoursRule
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    leaves_repo: LeaveRequestRepository

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    leave_service: LeaveService
    report_service: ReportService


def assemble(
    *,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    leaves_repo: LeaveRequestRepository,
    secret_key: str,
    tz: Optional[ZoneInfo] = None,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    rule: Optional[PunctualityRule] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories (MySQL in production, fakes in tests)."""

    return Container(
        conn=conn,
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        auth_service=AuthService(users_repo, secret_key=secret_key, token_ttl_hours=token_ttl_hours),
        user_service=UserService(users_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo, tz=tz),
        leave_service=LeaveService(leaves_repo, users_repo, tz=tz),
        report_service=ReportService(attendance_repo, users_repo, leaves_repo, rule=rule or FixedHoursRule(tz=tz)),
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    timezone_name: str = DEFAULT_TIMEZONE,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    workday_start: str = DEFAULT_WORKDAY_START,
    workday_end: str = DEFAULT_WORKDAY_END,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    tz = load_timezone(timezone_name)

    return assemble(
        users_repo=MySQLUserRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leaves_repo=MySQLLeaveRequestRepository(conn),
        secret_key=secret_key,
        tz=tz,
        token_ttl_hours=token_ttl_hours,
        rule=FixedHoursRule(start=parse_hhmm(workday_start), end=parse_hhmm(workday_end), tz=tz),
        conn=conn,
    )
