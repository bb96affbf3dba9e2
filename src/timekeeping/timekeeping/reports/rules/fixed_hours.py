from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timezone, tzinfo
from typing import Optional

from .base import PunctualityRule
from ...attendance.model import AttendanceReportRow


@dataclass(frozen=True)
class FixedHoursRule(PunctualityRule):
    """Standard rule: late after ``start``, early before ``end`` (same for every day).

    Aware timestamps are compared as wall-clock time in ``tz`` (UTC when None);
    naive ones are taken as already local.
    """

    start: time = time(9, 0)
    end: time = time(17, 0)
    tz: Optional[tzinfo] = None

    def _wall_time(self, value: datetime) -> time:
        if value.tzinfo is None:
            return value.time()
        return value.astimezone(self.tz or timezone.utc).time()

    def is_late(self, row: AttendanceReportRow) -> bool:
        return self._wall_time(row.clock_in) > self.start

    def is_early_departure(self, row: AttendanceReportRow) -> bool:
        # Open records have not departed yet.
        if row.clock_out is None:
            return False
        return self._wall_time(row.clock_out) < self.end
