"""
Balance Ledger

Per (user, policy, year) allocated/used counters.

Rows are created lazily and conflict-safely: the unique constraint on
(user_id, policy_id, year) decides which of several concurrent creators
wins, and every loser simply re-reads the winning row. Mutations (debit,
refund) operate on a row the caller has locked inside its transaction.

Invariant after every mutation: 0 <= total_used <= total_allocated.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from leaveservice.core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError
from leaveservice.models.leave_balance import LeaveBalance
from leaveservice.models.leave_policy import LeavePolicy
from leaveservice.services import policy_store

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class ProvisioningResult:
    attempted: int  # best-effort: one per policy visited
    created: int    # rows actually inserted


def current_year() -> int:
    return date.today().year


def get_balance(
    db: Session,
    user_id: str,
    policy_id: int,
    year: int,
    lock: bool = False,
) -> Optional[LeaveBalance]:
    """Fetch a balance row; with lock=True it is held FOR UPDATE until the transaction ends."""
    stmt = select(LeaveBalance).where(
        LeaveBalance.user_id == user_id,
        LeaveBalance.policy_id == policy_id,
        LeaveBalance.year == year,
    )
    if lock:
        stmt = stmt.with_for_update(of=LeaveBalance)
    return db.execute(stmt.execution_options(populate_existing=True)).scalar_one_or_none()


def insert_balance_if_absent(db: Session, user_id: str, policy: LeavePolicy, year: int) -> bool:
    """
    Insert a zero-usage balance unless one already exists.
    Returns True only when this call created the row.
    """
    values = {
        "user_id": user_id,
        "policy_id": policy.id,
        "year": year,
        "total_allocated": policy.max_days_per_year or 0,
        "total_used": 0,
    }
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        stmt = insert(LeaveBalance.__table__).values(**values).on_conflict_do_nothing(
            index_elements=["user_id", "policy_id", "year"]
        )
        return db.execute(stmt).rowcount == 1

    # Dialects without ON CONFLICT: let the unique constraint reject the duplicate
    try:
        with db.begin_nested():
            db.add(LeaveBalance(**values))
    except IntegrityError:
        logger.debug(f"Balance for user={user_id} policy={policy.id} year={year} created concurrently")
        return False
    return True


def get_or_init_balance(
    db: Session,
    user_id: str,
    policy_id: int,
    year: int,
    lock: bool = False,
) -> LeaveBalance:
    """
    Return the balance for (user, policy, year), creating it with the policy's
    annual allocation when absent. Safe to call concurrently for the same key.
    """
    balance = get_balance(db, user_id, policy_id, year, lock=lock)
    if balance is not None:
        return balance

    policy = policy_store.get_policy(db, policy_id)
    if policy is None:
        raise NotFoundError(
            "Leave balance not found",
            details={"user_id": user_id, "policy_id": policy_id, "year": year},
        )

    if insert_balance_if_absent(db, user_id, policy, year):
        logger.info(f"Initialized leave balance user={user_id} policy={policy_id} year={year} allocated={policy.max_days_per_year}")

    balance = get_balance(db, user_id, policy_id, year, lock=lock)
    if balance is None:
        raise NotFoundError(
            "Leave balance not found",
            details={"user_id": user_id, "policy_id": policy_id, "year": year},
        )
    return balance


def available_days(balance: LeaveBalance) -> int:
    return max(0, (balance.total_allocated or 0) - (balance.total_used or 0))


def debit(balance: LeaveBalance, days: int) -> LeaveBalance:
    if days <= 0:
        raise ValidationError("Debit must be a positive number of days", details={"days": days})
    available = available_days(balance)
    if available < days:
        raise InsufficientBalanceError(
            "Insufficient leave balance",
            details={"requested": days, "available": available},
        )
    balance.total_used = (balance.total_used or 0) + days
    return balance


def refund(balance: LeaveBalance, days: int) -> LeaveBalance:
    if days < 0:
        raise ValidationError("Refund must not be negative", details={"days": days})
    # Floored so a repeated refund cannot push usage below zero
    balance.total_used = max(0, (balance.total_used or 0) - days)
    return balance


def ensure_all_policies_provisioned(db: Session, user_id: str, year: Optional[int] = None) -> ProvisioningResult:
    """Idempotently create a zero-usage balance for every known policy."""
    if not user_id:
        raise ValidationError("user_id is required")
    year = year or current_year()

    attempted = 0
    created = 0
    for policy in policy_store.list_policies(db):
        attempted += 1
        if insert_balance_if_absent(db, user_id, policy, year):
            created += 1
    return ProvisioningResult(attempted=attempted, created=created)


def list_balances(db: Session, user_id: str, year: Optional[int] = None) -> List[LeaveBalance]:
    stmt = select(LeaveBalance).where(LeaveBalance.user_id == user_id)
    if year is not None:
        stmt = stmt.where(LeaveBalance.year == year)
    stmt = stmt.order_by(LeaveBalance.year.desc(), LeaveBalance.policy_id)
    return list(db.execute(stmt).scalars())
