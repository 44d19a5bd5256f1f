from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

from leaveservice.models.leave_policy import LeaveType


class LeavePolicyCreate(BaseModel):
    policy_name: str = Field(min_length=1, max_length=100)
    leave_type: LeaveType
    max_days_per_year: int = Field(ge=0)
    carry_forward: bool = False
    description: Optional[str] = None


class LeavePolicyResponse(BaseModel):
    id: int
    policy_name: str
    leave_type: str
    max_days_per_year: int
    carry_forward: bool
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
