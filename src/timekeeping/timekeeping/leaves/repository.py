from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def create_leave(
        self,
        *,
        user_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def get_for_owner(self, request_id: int, user_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leave_requests(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        user_id: Optional[int] = None,
        overlapping_start: Optional[date] = None,
        overlapping_end: Optional[date] = None,
    ) -> Sequence[LeaveRequest]:
        """Newest created first. The overlap bounds keep requests whose
        [start_date, end_date] intersects the given range."""

        raise NotImplementedError

    def decide_leave(
        self,
        *,
        request_id: int,
        status: LeaveStatus,
        decided_by: int,
        approved_at: Optional[datetime],
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Apply an approve/reject decision; False unless the request was still pending."""

        raise NotImplementedError

    def delete_pending(self, request_id: int, user_id: int) -> bool:
        """Delete an owner's pending request; False when nothing matched."""

        raise NotImplementedError
