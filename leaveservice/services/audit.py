from datetime import date, datetime
from typing import Any, List, Optional

from sqlalchemy import select

from leaveservice.models.leave_audit import LeaveAudit
from leaveservice.services.base import BaseService


class AuditAction:
    CREATE_REQUEST = "create_request"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"
    PROVISION_BALANCES = "provision_balances"


def _sanitize(obj: Any) -> Any:
    """Make details JSON-serializable (dates, pydantic models, nested containers)."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    return obj


class AuditService(BaseService):
    def record(
        self,
        action: str,
        actor_user_id: Optional[str],
        request_id: Optional[int],
        details: Optional[dict] = None,
    ) -> LeaveAudit:
        """
        Append an audit entry to the current transaction.
        Strictly append-only. The entry commits or rolls back with the
        state change it documents; failures propagate to the caller.
        """
        entry = LeaveAudit(
            action=action,
            user_id=actor_user_id,
            request_id=request_id,
            details=_sanitize(details or {}),
        )
        self.db.add(entry)
        self.db.flush()
        self._logger.debug(f"Audit {action} request={request_id} actor={actor_user_id}")
        return entry

    def list_for_request(self, request_id: int) -> List[LeaveAudit]:
        return list(
            self.db.execute(
                select(LeaveAudit)
                .where(LeaveAudit.request_id == request_id)
                .order_by(LeaveAudit.id)
            ).scalars()
        )
