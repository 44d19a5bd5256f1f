# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import leave_policy, leave_balance, leave_request, leave_audit

# Explicit class exports for cleaner imports
from .leave_policy import LeavePolicy, LeaveType
from .leave_balance import LeaveBalance
from .leave_request import LeaveRequest, LeaveStatus
from .leave_audit import LeaveAudit

__all__ = [
    "LeavePolicy",
    "LeaveType",
    "LeaveBalance",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveAudit",
]
