from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import hours_between, local_date, now_utc, to_utc
from ..common.validators import optional_text
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..users.model import User
from ..users.repository import UserRepository
from .model import AttendanceRecord, TodayStatus
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Clock-in/clock-out ledger.

    Per (user, calendar day) a record moves NotClockedIn -> ClockedIn ->
    ClockedOut and never goes back. "Today" is the calendar day of ``now`` in
    the organisation timezone. Instants are handled as aware UTC values and a
    naive ``now`` is read as wall-clock time in that zone.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        *,
        tz: Optional[ZoneInfo] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._tz = tz

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_utc(now, self._tz) if now else now_utc()

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("user not found")
        return user

    def _reload(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("attendance record not found")
        return record

    def clock_in(self, user_id: int, *, notes: Optional[str] = None, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._now(now)
        today = local_date(now, self._tz)

        user = self._require_user(user_id)
        if not user.is_active:
            raise ConflictError("user account is inactive")

        attendance_id = self._attendance.create_clock_in(
            user_id=user.user_id,
            work_date=today,
            clock_in=now,
            notes=optional_text(notes),
        )
        if attendance_id is None:
            logger.warning("duplicate clock-in for user %s on %s", user.user_id, today)
            raise ConflictError("already clocked in today")

        logger.info("user %s clocked in at %s", user.user_id, now.isoformat())
        return self._reload(attendance_id)

    def clock_out(self, user_id: int, *, notes: Optional[str] = None, now: Optional[datetime] = None) -> AttendanceRecord:
        now = self._now(now)
        today = local_date(now, self._tz)

        user = self._require_user(user_id)

        record = self._attendance.get_for_user_and_date(user.user_id, today)
        if not record:
            raise NotFoundError("no clock-in record found for today")
        if record.clock_out is not None:
            raise ConflictError("already clocked out today")
        if now <= to_utc(record.clock_in):
            raise ValidationError("clock-out time must be after clock-in time")

        total_hours = hours_between(record.clock_in, now)
        closed = self._attendance.record_clock_out(
            attendance_id=record.attendance_id,
            clock_out=now,
            total_hours=total_hours,
            notes=optional_text(notes),
        )
        if not closed:
            # Lost the race against a concurrent clock-out of the same record.
            logger.warning("duplicate clock-out for user %s on %s", user.user_id, today)
            raise ConflictError("already clocked out today")

        logger.info("user %s clocked out at %s (%.2f h)", user.user_id, now.isoformat(), total_hours)
        return self._reload(record.attendance_id)

    def get_today_status(self, user_id: int, *, now: Optional[datetime] = None) -> TodayStatus:
        today = local_date(self._now(now), self._tz)
        user = self._require_user(user_id)

        record = self._attendance.get_for_user_and_date(user.user_id, today)
        return TodayStatus(
            has_clocked_in=record is not None,
            has_clocked_out=record is not None and record.clock_out is not None,
            current_record=record,
        )

    def get_user_attendance(
        self,
        user_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        user = self._require_user(user_id)
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start date must be before or equal to end date")
        return list(self._attendance.list_for_user(user.user_id, start_date=start_date, end_date=end_date))

    def get_all_attendance(self) -> Sequence[AttendanceRecord]:
        return list(self._attendance.list_all())
