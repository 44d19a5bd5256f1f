from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.sql import func
from leaveservice.database import Base


class LeaveAudit(Base):
    """Append-only record of leave state changes. Rows are never updated or deleted."""
    __tablename__ = "leave_audit"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(50), nullable=False, index=True)
    user_id = Column(String(64), nullable=True)  # actor
    request_id = Column(Integer, ForeignKey("leave_requests.id"), nullable=True, index=True)
    details = Column(JSON, nullable=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
