import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from leaveservice.core.exceptions import NotFoundError, ValidationError
from leaveservice.core.security import Principal
from leaveservice.dependencies import get_current_principal, get_db, require_admin
from leaveservice.schemas.policy import LeavePolicyCreate, LeavePolicyResponse
from leaveservice.services import policy_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/policies", tags=["policies"])


@router.get("", response_model=List[LeavePolicyResponse])
def list_policies(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return policy_store.list_policies(db)


@router.get("/{policy_id}", response_model=LeavePolicyResponse)
def get_policy(
    policy_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    policy = policy_store.get_policy(db, policy_id)
    if not policy:
        raise NotFoundError("Leave policy not found", details={"policy_id": policy_id})
    return policy


@router.post("", response_model=LeavePolicyResponse, status_code=status.HTTP_201_CREATED)
def create_policy(
    payload: LeavePolicyCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin()),
):
    if policy_store.find_policy_by_name(db, payload.policy_name):
        raise ValidationError(f"Policy '{payload.policy_name}' already exists")

    policy = policy_store.create_policy(
        db,
        policy_name=payload.policy_name,
        leave_type=payload.leave_type.value,
        max_days_per_year=payload.max_days_per_year,
        carry_forward=payload.carry_forward,
        description=payload.description,
    )
    db.commit()
    db.refresh(policy)
    logger.info(f"Leave policy {policy.id} '{policy.policy_name}' created by {principal.user_id}")
    return policy
