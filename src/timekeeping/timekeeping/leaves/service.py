from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import now_utc, to_utc
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import LeaveRequest
from .repository import LeaveRequestRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave request workflow: pending -> approved | rejected, or deleted by its owner while pending."""

    def __init__(self, requests: LeaveRequestRepository, users: UserRepository, *, tz: Optional[ZoneInfo] = None):
        self._requests = requests
        self._users = users
        self._tz = tz

    def _require_user(self, user_id: int) -> None:
        if not self._users.get_by_id(int(user_id)):
            raise NotFoundError("user not found")

    def _require_request(self, request_id: int) -> LeaveRequest:
        req = self._requests.get_by_id(int(request_id))
        if not req:
            raise NotFoundError("leave request not found")
        return req

    def create_leave_request(
        self,
        *,
        user_id: int,
        leave_type: LeaveType | str,
        start_date: date,
        end_date: date,
        reason: str,
    ) -> LeaveRequest:
        self._require_user(user_id)

        if start_date > end_date:
            raise ValidationError("start date must be before or equal to end date")

        leave_type = require_enum(LeaveType, leave_type, "leave type")
        reason = require_non_empty(reason, "reason")

        request_id = self._requests.create_leave(
            user_id=int(user_id),
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
        )
        logger.info(
            "leave request %s created by user %s (%s, %s..%s)",
            request_id, user_id, leave_type.value, start_date, end_date,
        )
        return self._require_request(request_id)

    def update_leave_request_status(
        self,
        *,
        request_id: int,
        status: LeaveStatus | str,
        approver_id: int,
        rejection_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        req = self._require_request(request_id)

        approver = self._users.get_by_id(int(approver_id))
        if not approver:
            raise NotFoundError("approver not found")
        if not approver.is_admin:
            raise AuthorizationError("only admins can approve or reject leave requests")

        status = require_enum(LeaveStatus, status, "status")
        if status == LeaveStatus.PENDING:
            raise ValidationError("status must be approved or rejected")

        if not req.is_pending:
            logger.warning("leave request %s already %s, refusing %s", req.request_id, req.status.value, status.value)
            raise ConflictError("leave request has already been processed")

        decided = self._requests.decide_leave(
            request_id=req.request_id,
            status=status,
            decided_by=approver.user_id,
            approved_at=(to_utc(now, self._tz) if now else now_utc()) if status == LeaveStatus.APPROVED else None,
            rejection_reason=optional_text(rejection_reason),
        )
        if not decided:
            # Another approver got there first.
            raise ConflictError("leave request has already been processed")

        logger.info("leave request %s %s by user %s", req.request_id, status.value, approver.user_id)
        return self._require_request(req.request_id)

    def get_user_leave_requests(self, user_id: int) -> Sequence[LeaveRequest]:
        self._require_user(user_id)
        return list(self._requests.list_leave_requests(user_id=int(user_id)))

    def get_all_leave_requests(self) -> Sequence[LeaveRequest]:
        return list(self._requests.list_leave_requests())

    def get_pending_leave_requests(self) -> Sequence[LeaveRequest]:
        return list(self._requests.list_leave_requests(status=LeaveStatus.PENDING))

    def delete_leave_request(self, *, request_id: int, user_id: int) -> dict:
        # Same message for "absent" and "owned by someone else" so existence does not leak.
        req = self._requests.get_for_owner(int(request_id), int(user_id))
        if not req:
            raise NotFoundError("leave request not found or does not belong to user")
        if not req.is_pending:
            raise ConflictError("only pending leave requests can be deleted")

        if not self._requests.delete_pending(req.request_id, req.user_id):
            # Decided between the read and the delete.
            raise ConflictError("only pending leave requests can be deleted")

        logger.info("leave request %s deleted by user %s", req.request_id, user_id)
        return {"success": True}
