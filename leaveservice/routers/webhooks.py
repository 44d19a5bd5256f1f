import logging
from typing import Optional

from fastapi import APIRouter, Depends, status

from leaveservice.core.exceptions import ValidationError
from leaveservice.core.security import Principal
from leaveservice.dependencies import authorize_service_call, get_provisioning_service
from leaveservice.schemas.webhook import ProvisioningResponse, UserCreatedEvent
from leaveservice.services.provisioning import ProvisioningService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/user-created", response_model=ProvisioningResponse, status_code=status.HTTP_202_ACCEPTED)
def user_created(
    event: UserCreatedEvent,
    caller: Optional[Principal] = Depends(authorize_service_call),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """Provision leave balances for a newly created user across all policies."""
    user_id = event.resolved_user_id
    if not user_id:
        raise ValidationError("user id missing in payload")

    logger.info(f"user.created for {user_id} from {caller.user_id if caller else 'service'}")
    result = service.ensure_balances_for_user(user_id)
    return ProvisioningResponse(user_id=user_id, attempted=result.attempted, created=result.created)
