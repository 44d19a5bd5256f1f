import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status

from leaveservice.core.config import settings
from leaveservice.core.exceptions import ForbiddenError
from leaveservice.core.limiter import limiter, SUBMIT_RATE_LIMIT
from leaveservice.core.security import Principal
from leaveservice.dependencies import get_current_principal, get_leave_engine, require_approver
from leaveservice.schemas.leave import (
    ApprovalResponse,
    LeaveActionRequest,
    LeaveAuditResponse,
    LeaveBalanceResponse,
    LeaveDecisionRequest,
    LeaveRequestCreate,
    LeaveRequestPage,
    LeaveRequestResponse,
    UserBalancesResponse,
)
from leaveservice.services.leave_engine import LeaveEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leaves", tags=["leave"])


def _resolve_subject(principal: Principal, user_id: Optional[str]) -> str:
    """Employees act on themselves; HR/admin may name another user."""
    if not user_id or user_id == principal.user_id:
        return principal.user_id
    if not principal.can_approve:
        raise ForbiddenError("You can only access your own leave data")
    return user_id


def _ensure_owner_or_approver(principal: Principal, owner_id: str):
    if owner_id != principal.user_id and not principal.can_approve:
        raise ForbiddenError("You can only access your own leave requests")


def _approve(engine: LeaveEngine, request_id: int, principal: Principal) -> ApprovalResponse:
    result = engine.approve(request_id, principal.user_id)
    return ApprovalResponse.model_validate(result)


def _reject(engine: LeaveEngine, request_id: int, principal: Principal, note: Optional[str]) -> LeaveRequestResponse:
    return LeaveRequestResponse.model_validate(engine.reject(request_id, principal.user_id, note=note))


def _cancel(engine: LeaveEngine, request_id: int, principal: Principal) -> LeaveRequestResponse:
    leave = engine.get_request(request_id)
    _ensure_owner_or_approver(principal, leave.user_id)
    return LeaveRequestResponse.model_validate(engine.cancel(request_id, cancelled_by=principal.user_id))


# --- Endpoints ---

@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(SUBMIT_RATE_LIMIT)
def submit_leave_request(
    request: Request,
    payload: LeaveRequestCreate,
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    # The requester is always the token subject, never a body field
    leave = engine.submit(
        user_id=principal.user_id,
        policy_id=payload.policy_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        reason=payload.reason,
    )
    return leave


@router.get("", response_model=LeaveRequestPage)
def list_leave_requests(
    user_id: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    size: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size),
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    # HR/admin see everyone unless they filter; employees only ever see themselves
    if not principal.can_approve:
        user_id = _resolve_subject(principal, user_id)
    user_id = user_id.strip() if user_id else None
    status_filter = status_filter.strip().lower() if status_filter else None
    result = engine.list_requests(user_id=user_id, status=status_filter, page=page, size=size)
    return LeaveRequestPage(
        items=[LeaveRequestResponse.model_validate(leave) for leave in result.items],
        total=result.total,
        page=result.page,
        size=result.size,
    )


@router.get("/balance", response_model=UserBalancesResponse)
def get_leave_balance(
    user_id: Optional[str] = Query(default=None),
    year: Optional[int] = Query(default=None, ge=1970, le=9999),
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    subject = _resolve_subject(principal, user_id.strip() if user_id else None)
    balances = engine.get_balances(subject, year=year)
    return UserBalancesResponse(
        user_id=subject,
        balances=[LeaveBalanceResponse.model_validate(b) for b in balances],
    )


@router.get("/{request_id}", response_model=LeaveRequestResponse)
def get_leave_request(
    request_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    leave = engine.get_request(request_id)
    _ensure_owner_or_approver(principal, leave.user_id)
    return leave


@router.get("/{request_id}/audit", response_model=List[LeaveAuditResponse])
def get_leave_audit(
    request_id: int,
    principal: Principal = Depends(require_approver()),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    return engine.get_audit_trail(request_id)


@router.patch("/{request_id}")
def patch_leave_request(
    request_id: int,
    action: LeaveActionRequest,
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    """Single entry point for approve | reject | cancel."""
    logger.info(f"Patch leave request {request_id}: {action.action} by {principal.user_id}")
    if action.action == "cancel":
        return _cancel(engine, request_id, principal)

    # Only HR users may approve or reject leave requests
    if not principal.can_approve:
        raise ForbiddenError("Only HR or admin users can approve or reject leave requests")
    if action.action == "approve":
        return _approve(engine, request_id, principal)
    return _reject(engine, request_id, principal, action.note)


@router.patch("/{request_id}/approve", response_model=ApprovalResponse)
def approve_leave_request(
    request_id: int,
    principal: Principal = Depends(require_approver()),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    return _approve(engine, request_id, principal)


@router.patch("/{request_id}/reject", response_model=LeaveRequestResponse)
def reject_leave_request(
    request_id: int,
    decision: Optional[LeaveDecisionRequest] = Body(default=None),
    principal: Principal = Depends(require_approver()),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    return _reject(engine, request_id, principal, decision.note if decision else None)


@router.patch("/{request_id}/cancel", response_model=LeaveRequestResponse)
def cancel_leave_request(
    request_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: LeaveEngine = Depends(get_leave_engine),
):
    return _cancel(engine, request_id, principal)
