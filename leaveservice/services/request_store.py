"""
Request Store: leave request records and their overlap queries.
"""
from datetime import date
from typing import List, Optional

from sqlalchemy import func, not_, or_, select
from sqlalchemy.orm import Session

from leaveservice.models.leave_request import ACTIVE_STATUSES, LeaveRequest, LeaveStatus


def inclusive_days(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days + 1


def find_overlapping(
    db: Session,
    user_id: str,
    start_date: date,
    end_date: date,
) -> Optional[LeaveRequest]:
    """
    Any pending or approved request of the user sharing at least one day with
    [start_date, end_date]: NOT (existing.end < new.start OR existing.start > new.end).
    """
    stmt = (
        select(LeaveRequest)
        .where(
            LeaveRequest.user_id == user_id,
            LeaveRequest.status.in_(ACTIVE_STATUSES),
            not_(or_(LeaveRequest.end_date < start_date, LeaveRequest.start_date > end_date)),
        )
        .order_by(LeaveRequest.start_date)
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def create_request(
    db: Session,
    user_id: str,
    policy_id: int,
    start_date: date,
    end_date: date,
    reason: Optional[str] = None,
) -> LeaveRequest:
    leave = LeaveRequest(
        user_id=user_id,
        policy_id=policy_id,
        start_date=start_date,
        end_date=end_date,
        reason=reason,
        status=LeaveStatus.PENDING.value,
    )
    db.add(leave)
    db.flush()
    db.refresh(leave)
    return leave


def get_request(db: Session, request_id: int, lock: bool = False) -> Optional[LeaveRequest]:
    """Fetch a request; with lock=True it is held FOR UPDATE until the transaction ends."""
    stmt = select(LeaveRequest).where(LeaveRequest.id == request_id)
    if lock:
        stmt = stmt.with_for_update()
    return db.execute(stmt.execution_options(populate_existing=True)).scalar_one_or_none()


def _filtered(stmt, user_id: Optional[str], status: Optional[str]):
    if user_id:
        stmt = stmt.where(LeaveRequest.user_id == user_id)
    if status:
        stmt = stmt.where(LeaveRequest.status == status)
    return stmt


def list_requests(
    db: Session,
    user_id: Optional[str] = None,
    status: Optional[str] = None,
    page: int = 1,
    size: int = 50,
) -> List[LeaveRequest]:
    page = max(1, page)
    size = max(1, size)
    stmt = _filtered(select(LeaveRequest), user_id, status)
    stmt = stmt.order_by(LeaveRequest.start_date.desc(), LeaveRequest.id.desc())
    stmt = stmt.limit(size).offset((page - 1) * size)
    return list(db.execute(stmt).scalars())


def count_requests(db: Session, user_id: Optional[str] = None, status: Optional[str] = None) -> int:
    stmt = _filtered(select(func.count(LeaveRequest.id)), user_id, status)
    return db.execute(stmt).scalar_one()
