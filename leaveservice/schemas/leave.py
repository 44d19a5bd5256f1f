from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional


class LeaveRequestCreate(BaseModel):
    policy_id: int = Field(gt=0)
    start_date: date
    end_date: date
    reason: Optional[str] = Field(default=None, max_length=2000)


class LeaveRequestResponse(BaseModel):
    id: int
    user_id: str
    policy_id: int
    start_date: date
    end_date: date
    days: int
    reason: Optional[str] = None
    status: str
    approver_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LeaveRequestPage(BaseModel):
    items: List[LeaveRequestResponse]
    total: int
    page: int
    size: int

    model_config = ConfigDict(from_attributes=True)


class LeaveActionRequest(BaseModel):
    action: Literal["approve", "reject", "cancel"]
    note: Optional[str] = Field(default=None, max_length=2000)


class LeaveDecisionRequest(BaseModel):
    note: Optional[str] = Field(default=None, max_length=2000)


class LeaveBalanceResponse(BaseModel):
    policy_id: int
    policy_name: Optional[str] = None
    total_allocated: int
    total_used: int
    balance_days: int
    year: int

    model_config = ConfigDict(from_attributes=True)


class UserBalancesResponse(BaseModel):
    user_id: str
    balances: List[LeaveBalanceResponse]


class ApprovalResponse(BaseModel):
    request: LeaveRequestResponse
    balance: LeaveBalanceResponse

    model_config = ConfigDict(from_attributes=True)


class LeaveAuditResponse(BaseModel):
    id: int
    action: str
    user_id: Optional[str] = None
    request_id: Optional[int] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
