from __future__ import annotations

from abc import ABC, abstractmethod

from ...attendance.model import AttendanceReportRow


class PunctualityRule(ABC):
    """Decides late arrivals / early departures (Strategy Pattern for reports)."""

    @abstractmethod
    def is_late(self, row: AttendanceReportRow) -> bool:
        raise NotImplementedError

    @abstractmethod
    def is_early_departure(self, row: AttendanceReportRow) -> bool:
        raise NotImplementedError
