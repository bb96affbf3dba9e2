from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from src.timekeeping.timekeeping.attendance.model import AttendanceReportRow
from src.timekeeping.timekeeping.core.enums import LeaveStatus, LeaveType
from src.timekeeping.timekeeping.core.exceptions import ValidationError
from src.timekeeping.timekeeping.reports.rules.fixed_hours import FixedHoursRule
from src.timekeeping.timekeeping.reports.service import ReportService

MARCH_1 = date(2024, 3, 1)
MARCH_31 = date(2024, 3, 31)


@pytest.fixture
def service(attendance, users, leaves) -> ReportService:
    return ReportService(attendance, users, leaves)


def _row(clock_in: datetime, clock_out=None) -> AttendanceReportRow:
    return AttendanceReportRow(
        user_id=1,
        first_name="A",
        last_name="B",
        department=None,
        work_date=clock_in.date(),
        clock_in=clock_in,
        clock_out=clock_out,
        total_hours=None,
    )


def test_fixed_hours_rule_boundaries():
    rule = FixedHoursRule()

    assert not rule.is_late(_row(datetime(2024, 3, 4, 9, 0)))
    assert rule.is_late(_row(datetime(2024, 3, 4, 9, 0, 1)))
    assert not rule.is_early_departure(_row(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0)))
    assert rule.is_early_departure(_row(datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 16, 59)))
    assert not rule.is_early_departure(_row(datetime(2024, 3, 4, 9, 0)))


def test_fixed_hours_rule_custom_window():
    rule = FixedHoursRule(start=time(8, 0), end=time(16, 0))

    assert rule.is_late(_row(datetime(2024, 3, 4, 8, 30)))
    assert not rule.is_early_departure(_row(datetime(2024, 3, 4, 8, 0), datetime(2024, 3, 4, 16, 30)))


def test_fixed_hours_rule_reads_utc_instants_as_local_wall_time():
    rule = FixedHoursRule(tz=ZoneInfo("Europe/Berlin"))

    # March 4 is CET (UTC+1).
    assert rule.is_late(_row(datetime(2024, 3, 4, 8, 30, tzinfo=timezone.utc)))
    assert not rule.is_late(_row(datetime(2024, 3, 4, 7, 55, tzinfo=timezone.utc)))
    assert not rule.is_early_departure(
        _row(datetime(2024, 3, 4, 7, 55, tzinfo=timezone.utc), datetime(2024, 3, 4, 16, 0, tzinfo=timezone.utc))
    )


def test_attendance_report_aggregates_per_employee(service, users, attendance):
    ann = users.add("ann@example.com", first_name="Ann", last_name="Lee", department="Engineering")
    bob = users.add("bob@example.com", first_name="Bob", last_name="Ray", department="Sales")
    attendance.add(ann.user_id, datetime(2024, 3, 4, 8, 50), datetime(2024, 3, 4, 17, 20))
    attendance.add(ann.user_id, datetime(2024, 3, 5, 9, 15), datetime(2024, 3, 5, 16, 45))
    attendance.add(bob.user_id, datetime(2024, 3, 4, 9, 0))
    attendance.add(bob.user_id, datetime(2024, 4, 2, 9, 0), datetime(2024, 4, 2, 17, 0))

    report = service.attendance_report(start=MARCH_1, end=MARCH_31)

    assert [s.employee_name for s in report] == ["Ann Lee", "Bob Ray"]
    a, b = report
    assert a.total_days == 2
    assert a.total_hours == pytest.approx(16.0)
    assert a.average_hours_per_day == pytest.approx(8.0)
    assert (a.late_arrivals, a.early_departures) == (1, 1)
    assert b.total_days == 1
    assert b.total_hours == 0.0
    assert (b.late_arrivals, b.early_departures) == (0, 0)


def test_attendance_report_filters(service, users, attendance):
    ann = users.add("ann@example.com", department="Engineering")
    bob = users.add("bob@example.com", department="Sales")
    attendance.add(ann.user_id, datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0))
    attendance.add(bob.user_id, datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0))

    by_dept = service.attendance_report(start=MARCH_1, end=MARCH_31, department="Sales")
    by_user = service.attendance_report(start=MARCH_1, end=MARCH_31, user_id=ann.user_id)

    assert [s.user_id for s in by_dept] == [bob.user_id]
    assert [s.user_id for s in by_user] == [ann.user_id]


def test_attendance_report_rejects_inverted_range(service):
    with pytest.raises(ValidationError):
        service.attendance_report(start=MARCH_31, end=MARCH_1)


def test_department_summary(service, users, attendance):
    a = users.add("a@example.com", department="Engineering")
    b = users.add("b@example.com", department="Engineering")
    users.add("c@example.com", department="Engineering", is_active=False)
    users.add("s@example.com", department="Sales")
    users.add("nodept@example.com")
    attendance.add(a.user_id, datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 17, 0))
    attendance.add(a.user_id, datetime(2024, 3, 5, 9, 0), datetime(2024, 3, 5, 15, 0))
    attendance.add(b.user_id, datetime(2024, 3, 5, 9, 0))

    summary = {d.department: d for d in service.department_summary(start=MARCH_1, end=MARCH_31)}

    assert sorted(summary) == ["Engineering", "Sales"]
    eng = summary["Engineering"]
    assert eng.total_employees == 2
    assert eng.average_hours_per_day == pytest.approx(7.0)
    assert eng.attendance_rate == pytest.approx(100.0)
    sales = summary["Sales"]
    assert (sales.total_employees, sales.average_hours_per_day, sales.attendance_rate) == (1, 0.0, 0.0)


def test_leave_summary_counts_by_status_and_type(service, leaves):
    leaves.add(1, date(2024, 3, 1), date(2024, 3, 2))
    leaves.add(1, date(2024, 3, 10), date(2024, 3, 10), leave_type=LeaveType.SICK, status=LeaveStatus.APPROVED)
    leaves.add(2, date(2024, 3, 28), date(2024, 4, 3), status=LeaveStatus.REJECTED)
    leaves.add(2, date(2024, 5, 1), date(2024, 5, 2), leave_type=LeaveType.PERSONAL)

    summary = service.leave_summary()
    assert summary.total_requests == 4
    assert (summary.pending_requests, summary.approved_requests, summary.rejected_requests) == (2, 1, 1)
    assert summary.requests_by_type == {"vacation": 2, "sick": 1, "personal": 1}

    march = service.leave_summary(start=MARCH_1, end=MARCH_31)
    assert march.total_requests == 3
    assert "personal" not in march.requests_by_type


def test_leave_summary_empty(service):
    summary = service.leave_summary()

    assert summary.total_requests == 0
    assert summary.requests_by_type == {}
