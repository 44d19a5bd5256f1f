from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, CheckConstraint
from sqlalchemy.sql import func
from leaveservice.database import Base
import enum


class LeaveType(str, enum.Enum):
    ANNUAL = "annual"
    SICK = "sick"
    CASUAL = "casual"
    UNPAID = "unpaid"
    MATERNITY = "maternity"
    PATERNITY = "paternity"
    OTHER = "other"


class LeavePolicy(Base):
    __tablename__ = "leave_policies"
    __table_args__ = (
        CheckConstraint("max_days_per_year >= 0", name="ck_leave_policies_max_days_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    policy_name = Column(String(100), nullable=False)
    leave_type = Column(String(50), nullable=False, index=True)  # LeaveType value
    max_days_per_year = Column(Integer, nullable=False, default=0)
    carry_forward = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<LeavePolicy {self.id} {self.policy_name} ({self.max_days_per_year}d)>"
