from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day.

    ``clock_in``/``clock_out`` are aware UTC instants; ``work_date`` is the
    calendar day in the organisation timezone. ``total_hours`` is set together
    with ``clock_out`` and never recomputed.
    """

    attendance_id: int
    user_id: int
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime] = None
    total_hours: Optional[float] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out is None


@dataclass(frozen=True)
class TodayStatus:
    has_clocked_in: bool
    has_clocked_out: bool
    current_record: Optional[AttendanceRecord]


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports (record joined with its owner)."""

    user_id: int
    first_name: str
    last_name: str
    department: Optional[str]
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime]
    total_hours: Optional[float]

    @property
    def employee_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
