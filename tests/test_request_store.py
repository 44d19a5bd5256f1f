import pytest
from datetime import date

from leaveservice.models.leave_request import LeaveStatus
from leaveservice.services import request_store
from tests.conftest import EMPLOYEE_ID, OTHER_EMPLOYEE_ID


@pytest.fixture
def existing_request(session_factory, annual_policy):
    with session_factory.begin() as db:
        return request_store.create_request(
            db, EMPLOYEE_ID, annual_policy.id, date(2025, 1, 12), date(2025, 1, 14), "Trip"
        )


def _set_status(session_factory, request_id, status):
    with session_factory.begin() as db:
        request_store.get_request(db, request_id).status = status


def _overlap(session_factory, user_id, start, end):
    with session_factory() as db:
        return request_store.find_overlapping(db, user_id, start, end)


def test_inclusive_days():
    assert request_store.inclusive_days(date(2025, 6, 1), date(2025, 6, 5)) == 5
    assert request_store.inclusive_days(date(2025, 6, 1), date(2025, 6, 1)) == 1
    assert request_store.inclusive_days(date(2024, 12, 31), date(2025, 1, 1)) == 2


def test_create_request_starts_pending(existing_request):
    assert existing_request.status == LeaveStatus.PENDING.value
    assert existing_request.approver_id is None
    assert existing_request.days == 3


@pytest.mark.parametrize("start,end", [
    (date(2025, 1, 10), date(2025, 1, 15)),  # encloses
    (date(2025, 1, 13), date(2025, 1, 13)),  # inside
    (date(2025, 1, 14), date(2025, 1, 20)),  # shares the last day
    (date(2025, 1, 1), date(2025, 1, 12)),   # shares the first day
])
def test_find_overlapping_hits(session_factory, existing_request, start, end):
    hit = _overlap(session_factory, EMPLOYEE_ID, start, end)
    assert hit is not None
    assert hit.id == existing_request.id


@pytest.mark.parametrize("start,end", [
    (date(2025, 1, 20), date(2025, 1, 22)),
    (date(2025, 1, 1), date(2025, 1, 11)),
    (date(2025, 1, 15), date(2025, 1, 15)),
])
def test_find_overlapping_misses_disjoint_ranges(session_factory, existing_request, start, end):
    assert _overlap(session_factory, EMPLOYEE_ID, start, end) is None


def test_find_overlapping_is_per_user(session_factory, existing_request):
    assert _overlap(session_factory, OTHER_EMPLOYEE_ID, date(2025, 1, 12), date(2025, 1, 14)) is None


def test_find_overlapping_counts_approved(session_factory, existing_request):
    _set_status(session_factory, existing_request.id, LeaveStatus.APPROVED.value)
    assert _overlap(session_factory, EMPLOYEE_ID, date(2025, 1, 13), date(2025, 1, 13)) is not None


@pytest.mark.parametrize("status", [LeaveStatus.REJECTED.value, LeaveStatus.CANCELLED.value])
def test_find_overlapping_ignores_closed_requests(session_factory, existing_request, status):
    _set_status(session_factory, existing_request.id, status)
    assert _overlap(session_factory, EMPLOYEE_ID, date(2025, 1, 12), date(2025, 1, 14)) is None


def test_list_requests_filters_orders_and_paginates(session_factory, annual_policy):
    with session_factory.begin() as db:
        for day in (3, 10, 17):
            request_store.create_request(db, EMPLOYEE_ID, annual_policy.id, date(2025, 2, day), date(2025, 2, day))
        request_store.create_request(db, OTHER_EMPLOYEE_ID, annual_policy.id, date(2025, 2, 5), date(2025, 2, 5))

    with session_factory() as db:
        first_page = request_store.list_requests(db, user_id=EMPLOYEE_ID, page=1, size=2)
        second_page = request_store.list_requests(db, user_id=EMPLOYEE_ID, page=2, size=2)
        total = request_store.count_requests(db, user_id=EMPLOYEE_ID)
        everyone = request_store.count_requests(db)
        pending = request_store.count_requests(db, status=LeaveStatus.PENDING.value)
        approved = request_store.count_requests(db, status=LeaveStatus.APPROVED.value)

    assert [r.start_date.day for r in first_page] == [17, 10]
    assert [r.start_date.day for r in second_page] == [3]
    assert total == 3
    assert everyone == 4
    assert pending == 4
    assert approved == 0


def test_get_request_missing_returns_none(session_factory):
    with session_factory() as db:
        assert request_store.get_request(db, 12345) is None
        assert request_store.get_request(db, 12345, lock=True) is None
