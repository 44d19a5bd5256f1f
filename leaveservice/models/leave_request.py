from sqlalchemy import Column, Integer, String, Date, Text, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.sql import func
from leaveservice.database import Base
import enum


class LeaveStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


# Statuses that block another request over the same dates
ACTIVE_STATUSES = (LeaveStatus.PENDING.value, LeaveStatus.APPROVED.value)
CLOSED_STATUSES = (LeaveStatus.REJECTED.value, LeaveStatus.CANCELLED.value)


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_leave_requests_date_order"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    policy_id = Column(Integer, ForeignKey("leave_policies.id"), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=LeaveStatus.PENDING.value, index=True)  # LeaveStatus value
    approver_id = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)  # decision time for approve and reject
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def __repr__(self):
        return f"<LeaveRequest {self.id} {self.user_id} {self.start_date}..{self.end_date} ({self.status})>"
