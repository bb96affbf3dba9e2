from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import LeaveStatus
from ..core.exceptions import ValidationError
from ..leaves.repository import LeaveRequestRepository
from ..users.repository import UserRepository
from .model import DepartmentSummary, EmployeeAttendanceSummary, LeaveRequestsSummary
from .rules.base import PunctualityRule
from .rules.fixed_hours import FixedHoursRule


def _check_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and start > end:
        raise ValidationError("start date must be before or equal to end date")


class ReportService:
    """Read-only aggregations over attendance records and leave requests."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        leaves: LeaveRequestRepository,
        *,
        rule: Optional[PunctualityRule] = None,
    ):
        self._attendance = attendance
        self._users = users
        self._leaves = leaves
        self._rule = rule or FixedHoursRule()

    def attendance_report(
        self,
        *,
        start: date,
        end: date,
        department: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> list[EmployeeAttendanceSummary]:
        _check_range(start, end)
        rows = self._attendance.get_report_rows(start_date=start, end_date=end, department=department, user_id=user_id)

        summary_map: dict[int, dict] = {}
        for r in rows:
            s = summary_map.get(r.user_id)
            if not s:
                s = {
                    "user_id": r.user_id,
                    "employee_name": r.employee_name,
                    "department": r.department,
                    "total_days": 0,
                    "total_hours": 0.0,
                    "late_arrivals": 0,
                    "early_departures": 0,
                }
                summary_map[r.user_id] = s
            s["total_days"] += 1
            s["total_hours"] += r.total_hours or 0.0
            s["late_arrivals"] += int(self._rule.is_late(r))
            s["early_departures"] += int(self._rule.is_early_departure(r))

        out = [
            EmployeeAttendanceSummary(
                user_id=s["user_id"],
                employee_name=s["employee_name"],
                department=s["department"],
                total_days=s["total_days"],
                total_hours=round(s["total_hours"], 2),
                average_hours_per_day=round(s["total_hours"] / s["total_days"], 2),
                late_arrivals=s["late_arrivals"],
                early_departures=s["early_departures"],
            )
            for s in summary_map.values()
        ]
        out.sort(key=lambda x: (x.employee_name, x.user_id))
        return out

    def department_summary(self, *, start: date, end: date) -> list[DepartmentSummary]:
        _check_range(start, end)

        members: dict[str, set[int]] = {}
        for u in self._users.list_all():
            if u.is_active and u.department:
                members.setdefault(u.department, set()).add(u.user_id)

        rows = self._attendance.get_report_rows(start_date=start, end_date=end)

        out: list[DepartmentSummary] = []
        for department, user_ids in members.items():
            dept_rows = [r for r in rows if r.user_id in user_ids]
            hours = [r.total_hours for r in dept_rows if r.total_hours is not None]
            attended = {r.user_id for r in dept_rows}
            out.append(
                DepartmentSummary(
                    department=department,
                    total_employees=len(user_ids),
                    average_hours_per_day=round(sum(hours) / len(hours), 2) if hours else 0.0,
                    attendance_rate=round(len(attended) / len(user_ids) * 100, 2),
                )
            )

        out.sort(key=lambda x: x.department)
        return out

    def leave_summary(self, *, start: Optional[date] = None, end: Optional[date] = None) -> LeaveRequestsSummary:
        _check_range(start, end)
        requests = self._leaves.list_leave_requests(overlapping_start=start, overlapping_end=end)

        by_status = Counter(r.status for r in requests)
        by_type = Counter(r.leave_type.value for r in requests)
        return LeaveRequestsSummary(
            total_requests=len(requests),
            pending_requests=by_status[LeaveStatus.PENDING],
            approved_requests=by_status[LeaveStatus.APPROVED],
            rejected_requests=by_status[LeaveStatus.REJECTED],
            requests_by_type=dict(by_type),
        )
