from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class EmployeeAttendanceSummary:
    user_id: int
    employee_name: str
    department: Optional[str]
    total_days: int
    total_hours: float
    average_hours_per_day: float
    late_arrivals: int
    early_departures: int


@dataclass(frozen=True)
class DepartmentSummary:
    department: str
    total_employees: int
    average_hours_per_day: float
    attendance_rate: float


@dataclass(frozen=True)
class LeaveRequestsSummary:
    total_requests: int = 0
    pending_requests: int = 0
    approved_requests: int = 0
    rejected_requests: int = 0
    requests_by_type: dict[str, int] = field(default_factory=dict)
