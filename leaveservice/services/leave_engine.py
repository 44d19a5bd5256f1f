"""
Leave Lifecycle Engine

Orchestrates submission, approval, rejection and cancellation of leave
requests. It is the only component that mutates requests and balances
together.

Architecture:
- Router -> LeaveEngine (this module) -> stores (policy/request/balance) + audit
- The engine owns the transaction: each public operation opens exactly one
  transaction from the injected session factory and passes that session to
  every store call. Any exception rolls the whole unit back, so a request,
  its balance change and its audit entry become visible together or not at all.
- Authorization is the caller's job. The engine only refuses self-approval
  and self-rejection; callers of approve/reject must already have verified
  an HR or admin role.

Submission is optimistic and approval is authoritative: submit only checks
that the balance covers the request (without locking or reserving it), while
approve locks the balance row and re-checks before debiting. Concurrent
submissions competing for the same days can therefore all be accepted, and
the later approvals fail with InsufficientBalanceError. Do not turn this into
a reservation at submit time; that changes which requests can be filed.

Status machine:
    pending  -> approved | rejected | cancelled
    approved -> cancelled (refunds the debited days)
    rejected, cancelled: terminal
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from leaveservice.core.exceptions import (
    ForbiddenError,
    InsufficientBalanceError,
    InvalidDateRangeError,
    InvalidStateError,
    NotFoundError,
    OverlappingRequestError,
    ValidationError,
)
from leaveservice.models.leave_audit import LeaveAudit
from leaveservice.models.leave_balance import LeaveBalance
from leaveservice.models.leave_request import CLOSED_STATUSES, LeaveRequest, LeaveStatus
from leaveservice.services import balance_ledger, request_store
from leaveservice.services.audit import AuditAction, AuditService

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 2000


@dataclass
class ApprovalResult:
    request: LeaveRequest
    balance: LeaveBalance


@dataclass
class RequestPage:
    items: List[LeaveRequest]
    total: int
    page: int
    size: int


def normalize_date(value: Any, field: str) -> date:
    """Coerce a date, datetime or ISO-8601 string to a calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise InvalidDateRangeError(f"Invalid {field}: {value!r}", details={"field": field})


class LeaveEngine:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Lifecycle operations
    # ------------------------------------------------------------------

    def submit(
        self,
        user_id: str,
        policy_id: int,
        start_date: Any,
        end_date: Any,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        if not user_id or not policy_id or not start_date or not end_date:
            raise ValidationError("Missing required fields")
        if reason is not None and len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"reason must be at most {MAX_REASON_LENGTH} characters")

        start = normalize_date(start_date, "start_date")
        end = normalize_date(end_date, "end_date")
        if end < start:
            raise InvalidDateRangeError(
                "Invalid date range",
                details={"start_date": start.isoformat(), "end_date": end.isoformat()},
            )
        days = request_store.inclusive_days(start, end)

        with self._session_factory.begin() as db:
            overlap = request_store.find_overlapping(db, user_id, start, end)
            if overlap is not None:
                raise OverlappingRequestError(
                    "Overlapping leave request exists",
                    details={"request_id": overlap.id, "status": overlap.status},
                )

            # Checked, not reserved: approval re-validates under a lock
            balance = balance_ledger.get_or_init_balance(db, user_id, policy_id, start.year)
            available = balance_ledger.available_days(balance)
            if available < days:
                raise InsufficientBalanceError(
                    "Insufficient leave balance",
                    details={"requested": days, "available": available},
                )

            leave = request_store.create_request(db, user_id, policy_id, start, end, reason)
            AuditService(db).record(
                AuditAction.CREATE_REQUEST,
                actor_user_id=user_id,
                request_id=leave.id,
                details={"days": days, "reason": reason},
            )

        logger.info(f"Leave request {leave.id} submitted by {user_id} for {days} day(s) on policy {policy_id}")
        return leave

    def approve(self, request_id: int, approver_id: str) -> ApprovalResult:
        with self._session_factory.begin() as db:
            leave = self._load_for_decision(db, request_id, approver_id, "approve")
            days = request_store.inclusive_days(leave.start_date, leave.end_date)

            # Authoritative check: the balance was only validated at submission
            balance = self._lock_balance(db, leave)
            balance_ledger.debit(balance, days)

            leave.status = LeaveStatus.APPROVED.value
            leave.approver_id = approver_id
            leave.approved_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(leave)

            AuditService(db).record(
                AuditAction.APPROVE,
                actor_user_id=approver_id,
                request_id=leave.id,
                details={"days": days},
            )

        logger.info(f"Leave request {request_id} approved by {approver_id}; debited {days} day(s)")
        return ApprovalResult(request=leave, balance=balance)

    def reject(self, request_id: int, approver_id: str, note: Optional[str] = None) -> LeaveRequest:
        with self._session_factory.begin() as db:
            leave = self._load_for_decision(db, request_id, approver_id, "reject")

            leave.status = LeaveStatus.REJECTED.value
            leave.approver_id = approver_id
            leave.approved_at = datetime.now(timezone.utc)
            db.flush()
            db.refresh(leave)

            AuditService(db).record(
                AuditAction.REJECT,
                actor_user_id=approver_id,
                request_id=leave.id,
                details={"note": note},
            )

        logger.info(f"Leave request {request_id} rejected by {approver_id}")
        return leave

    def cancel(self, request_id: int, cancelled_by: Optional[str] = None) -> LeaveRequest:
        refunded = 0
        with self._session_factory.begin() as db:
            leave = request_store.get_request(db, request_id, lock=True)
            if leave is None:
                raise NotFoundError("Leave request not found", details={"request_id": request_id})
            if leave.status in CLOSED_STATUSES:
                raise InvalidStateError(
                    "Request already closed",
                    details={"request_id": request_id, "status": leave.status},
                )

            if leave.status == LeaveStatus.APPROVED.value:
                refunded = request_store.inclusive_days(leave.start_date, leave.end_date)
                balance = self._lock_balance(db, leave)
                balance_ledger.refund(balance, refunded)

            leave.status = LeaveStatus.CANCELLED.value
            db.flush()
            db.refresh(leave)

            AuditService(db).record(
                AuditAction.CANCEL,
                actor_user_id=cancelled_by,
                request_id=leave.id,
                details={"cancelled_by": cancelled_by, "refunded_days": refunded},
            )

        logger.info(f"Leave request {request_id} cancelled by {cancelled_by}; refunded {refunded} day(s)")
        return leave

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_request(self, request_id: int) -> LeaveRequest:
        with self._session_factory() as db:
            leave = request_store.get_request(db, request_id)
        if leave is None:
            raise NotFoundError("Leave request not found", details={"request_id": request_id})
        return leave

    def list_requests(
        self,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 50,
    ) -> RequestPage:
        if status is not None and status not in {s.value for s in LeaveStatus}:
            raise ValidationError(
                f"Unknown status '{status}'",
                details={"allowed": [s.value for s in LeaveStatus]},
            )
        with self._session_factory() as db:
            items = request_store.list_requests(db, user_id=user_id, status=status, page=page, size=size)
            total = request_store.count_requests(db, user_id=user_id, status=status)
        return RequestPage(items=items, total=total, page=page, size=size)

    def get_balances(self, user_id: str, year: Optional[int] = None) -> List[LeaveBalance]:
        """Balances for a user and year, provisioning them first when the user has none."""
        if not user_id:
            raise ValidationError("user_id is required")
        year = year or balance_ledger.current_year()
        with self._session_factory.begin() as db:
            balances = balance_ledger.list_balances(db, user_id, year)
            if not balances:
                result = balance_ledger.ensure_all_policies_provisioned(db, user_id, year)
                if result.created:
                    logger.info(f"Provisioned {result.created} balance(s) for {user_id} on first query")
                balances = balance_ledger.list_balances(db, user_id, year)
        return balances

    def get_audit_trail(self, request_id: int) -> List[LeaveAudit]:
        with self._session_factory() as db:
            if request_store.get_request(db, request_id) is None:
                raise NotFoundError("Leave request not found", details={"request_id": request_id})
            return AuditService(db).list_for_request(request_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _load_for_decision(db: Session, request_id: int, actor_id: str, action: str) -> LeaveRequest:
        """Lock a pending request for approve/reject and refuse self-decisions."""
        if not actor_id:
            raise ValidationError("approver_id is required")
        leave = request_store.get_request(db, request_id, lock=True)
        if leave is None:
            raise NotFoundError("Leave request not found", details={"request_id": request_id})
        if leave.status != LeaveStatus.PENDING.value:
            raise InvalidStateError(
                f"Only pending requests can be {action}d",
                details={"request_id": request_id, "status": leave.status},
            )
        if str(actor_id) == str(leave.user_id):
            raise ForbiddenError(f"Users cannot {action} their own leave requests")
        return leave

    @staticmethod
    def _lock_balance(db: Session, leave: LeaveRequest) -> LeaveBalance:
        balance = balance_ledger.get_balance(
            db, leave.user_id, leave.policy_id, leave.start_date.year, lock=True
        )
        if balance is None:
            raise NotFoundError(
                "Leave balance not found",
                details={"user_id": leave.user_id, "policy_id": leave.policy_id, "year": leave.start_date.year},
            )
        return balance
