import logging
from typing import Optional

from sqlalchemy.orm import sessionmaker

from leaveservice.core.exceptions import ValidationError
from leaveservice.services import balance_ledger
from leaveservice.services.audit import AuditAction, AuditService
from leaveservice.services.balance_ledger import ProvisioningResult

logger = logging.getLogger(__name__)


class ProvisioningService:
    """Ensures every user has a balance row for every policy (user-created webhook, scripts)."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def ensure_balances_for_user(self, user_id: str, year: Optional[int] = None) -> ProvisioningResult:
        if not user_id:
            raise ValidationError("user_id is required")
        year = year or balance_ledger.current_year()

        with self._session_factory.begin() as db:
            result = balance_ledger.ensure_all_policies_provisioned(db, user_id, year)
            if result.attempted:
                AuditService(db).record(
                    AuditAction.PROVISION_BALANCES,
                    actor_user_id=None,
                    request_id=None,
                    details={
                        "user_id": user_id,
                        "year": year,
                        "attempted": result.attempted,
                        "created": result.created,
                    },
                )

        logger.info(f"Provisioned balances for {user_id} ({year}): attempted={result.attempted} created={result.created}")
        return result
