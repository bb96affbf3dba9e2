from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.timekeeping.timekeeping.core.enums import LeaveStatus, LeaveType, Role
from src.timekeeping.timekeeping.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.timekeeping.timekeeping.leaves.service import LeaveService


@pytest.fixture
def service(leaves, users) -> LeaveService:
    return LeaveService(leaves, users)


@pytest.fixture
def admin(users):
    return users.add("boss@example.com", role=Role.ADMIN)


@pytest.fixture
def employee(users):
    return users.add("emp@example.com")


def _create(service, user_id, start=date(2024, 3, 10), end=date(2024, 3, 12), leave_type="vacation"):
    return service.create_leave_request(
        user_id=user_id, leave_type=leave_type, start_date=start, end_date=end, reason="family trip"
    )


def test_create_leave_request_is_pending(service, employee):
    req = _create(service, employee.user_id)

    assert req.status == LeaveStatus.PENDING
    assert req.leave_type == LeaveType.VACATION
    assert req.reason == "family trip"
    assert req.approved_by is None and req.approved_at is None
    assert req.days == 3


def test_create_single_day_leave(service, employee):
    req = _create(service, employee.user_id, start=date(2024, 3, 10), end=date(2024, 3, 10))

    assert req.days == 1


def test_create_rejects_inverted_range(service, employee):
    with pytest.raises(ValidationError, match="start date must be before or equal to end date"):
        _create(service, employee.user_id, start=date(2024, 3, 12), end=date(2024, 3, 10))


@pytest.mark.parametrize("leave_type", ["holiday", "", None])
def test_create_rejects_unknown_type(service, employee, leave_type):
    with pytest.raises(ValidationError):
        _create(service, employee.user_id, leave_type=leave_type)


def test_create_rejects_blank_reason(service, employee):
    with pytest.raises(ValidationError):
        service.create_leave_request(
            user_id=employee.user_id,
            leave_type="sick",
            start_date=date(2024, 3, 10),
            end_date=date(2024, 3, 10),
            reason="  ",
        )


def test_create_for_unknown_user(service):
    with pytest.raises(NotFoundError):
        _create(service, 42)


def test_approve_records_audit_trail(service, admin, employee):
    req = _create(service, employee.user_id)
    decided_at = datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc)

    out = service.update_leave_request_status(
        request_id=req.request_id, status="approved", approver_id=admin.user_id, now=decided_at
    )

    assert out.status == LeaveStatus.APPROVED
    assert out.approved_by == admin.user_id
    assert out.approved_at == decided_at
    assert out.rejection_reason is None


def test_reject_stores_reason(service, admin, employee):
    req = _create(service, employee.user_id)

    out = service.update_leave_request_status(
        request_id=req.request_id, status="rejected", approver_id=admin.user_id, rejection_reason="busy season"
    )

    assert out.status == LeaveStatus.REJECTED
    assert out.approved_by == admin.user_id
    assert out.approved_at is None
    assert out.rejection_reason == "busy season"


def test_decided_request_cannot_be_decided_again(service, admin, employee):
    req = _create(service, employee.user_id)
    service.update_leave_request_status(request_id=req.request_id, status="approved", approver_id=admin.user_id)

    with pytest.raises(ConflictError, match="already been processed"):
        service.update_leave_request_status(request_id=req.request_id, status="rejected", approver_id=admin.user_id)


def test_status_update_requires_admin(service, employee, users):
    colleague = users.add("peer@example.com")
    req = _create(service, employee.user_id)

    with pytest.raises(AuthorizationError):
        service.update_leave_request_status(request_id=req.request_id, status="approved", approver_id=colleague.user_id)


def test_status_update_rejects_pending_target(service, admin, employee):
    req = _create(service, employee.user_id)

    with pytest.raises(ValidationError):
        service.update_leave_request_status(request_id=req.request_id, status="pending", approver_id=admin.user_id)


def test_status_update_unknown_request(service, admin):
    with pytest.raises(NotFoundError, match="leave request not found"):
        service.update_leave_request_status(request_id=404, status="approved", approver_id=admin.user_id)


def test_status_update_lost_race_reports_conflict(service, admin, employee, leaves, monkeypatch):
    req = _create(service, employee.user_id)
    monkeypatch.setattr(leaves, "decide_leave", lambda **kwargs: False)

    with pytest.raises(ConflictError):
        service.update_leave_request_status(request_id=req.request_id, status="approved", approver_id=admin.user_id)


def test_listings_are_newest_first(service, admin, employee, users):
    other = users.add("other@example.com")
    r1 = _create(service, employee.user_id)
    r2 = _create(service, other.user_id)
    r3 = _create(service, employee.user_id)
    service.update_leave_request_status(request_id=r2.request_id, status="rejected", approver_id=admin.user_id)

    assert [r.request_id for r in service.get_all_leave_requests()] == [r3.request_id, r2.request_id, r1.request_id]
    assert [r.request_id for r in service.get_user_leave_requests(employee.user_id)] == [r3.request_id, r1.request_id]
    assert [r.request_id for r in service.get_pending_leave_requests()] == [r3.request_id, r1.request_id]


def test_owner_deletes_pending_request(service, employee, leaves):
    req = _create(service, employee.user_id)

    assert service.delete_leave_request(request_id=req.request_id, user_id=employee.user_id) == {"success": True}
    assert leaves.get_by_id(req.request_id) is None


def test_delete_by_non_owner_looks_like_missing(service, employee, users):
    stranger = users.add("stranger@example.com")
    req = _create(service, employee.user_id)

    with pytest.raises(NotFoundError, match="does not belong to user"):
        service.delete_leave_request(request_id=req.request_id, user_id=stranger.user_id)
    with pytest.raises(NotFoundError, match="does not belong to user"):
        service.delete_leave_request(request_id=999, user_id=employee.user_id)


def test_decided_request_cannot_be_deleted(service, admin, employee, leaves):
    req = _create(service, employee.user_id)
    service.update_leave_request_status(request_id=req.request_id, status="approved", approver_id=admin.user_id)

    with pytest.raises(ConflictError, match="only pending leave requests can be deleted"):
        service.delete_leave_request(request_id=req.request_id, user_id=employee.user_id)
    assert leaves.get_by_id(req.request_id).status == LeaveStatus.APPROVED


def test_user_without_requests_gets_empty_list(service, employee):
    assert service.get_user_leave_requests(employee.user_id) == []


def test_user_requests_for_unknown_user(service):
    with pytest.raises(NotFoundError, match="user not found"):
        service.get_user_leave_requests(404)


def test_status_update_unknown_approver(service, employee):
    req = _create(service, employee.user_id)

    with pytest.raises(NotFoundError, match="approver not found"):
        service.update_leave_request_status(request_id=req.request_id, status="approved", approver_id=404)
