"""
Policy Store: read access to leave policies, plus creation for administrators.

Policies are reference data. Nothing in the lifecycle mutates them.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from leaveservice.core.exceptions import ValidationError
from leaveservice.models.leave_policy import LeavePolicy, LeaveType


def get_policy(db: Session, policy_id: int) -> Optional[LeavePolicy]:
    return db.get(LeavePolicy, policy_id)


def list_policies(db: Session) -> List[LeavePolicy]:
    return list(db.execute(select(LeavePolicy).order_by(LeavePolicy.id)).scalars())


def find_policy_by_name(db: Session, policy_name: str) -> Optional[LeavePolicy]:
    return db.execute(
        select(LeavePolicy).where(LeavePolicy.policy_name == policy_name)
    ).scalars().first()


def create_policy(
    db: Session,
    policy_name: str,
    leave_type: str,
    max_days_per_year: int,
    carry_forward: bool = False,
    description: Optional[str] = None,
) -> LeavePolicy:
    if not policy_name or not policy_name.strip():
        raise ValidationError("policy_name is required")
    if max_days_per_year is None or max_days_per_year < 0:
        raise ValidationError("max_days_per_year must be a non-negative integer")
    try:
        leave_type = LeaveType(str(leave_type).lower()).value
    except ValueError:
        raise ValidationError(
            f"Unknown leave_type '{leave_type}'",
            details={"allowed": [t.value for t in LeaveType]},
        )

    policy = LeavePolicy(
        policy_name=policy_name.strip(),
        leave_type=leave_type,
        max_days_per_year=max_days_per_year,
        carry_forward=carry_forward,
        description=description,
    )
    db.add(policy)
    db.flush()
    db.refresh(policy)
    return policy
