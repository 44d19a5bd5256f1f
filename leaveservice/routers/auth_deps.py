"""
RBAC Dependencies.
Turns the bearer token into a Principal and gates endpoints by role.
"""
import hmac
import logging
from typing import Callable, List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from leaveservice.core.config import settings
from leaveservice.core.exceptions import AuthenticationError, ForbiddenError
from leaveservice.core.security import Principal, Role, decode_access_token, principal_from_claims

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Principal:
    """
    Extracts the caller's identity and normalized roles from the bearer token.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authenticated")
    claims = decode_access_token(credentials.credentials)
    return principal_from_claims(claims)


def require_role(allowed_roles: List[Role]) -> Callable:
    """
    Dependency factory that checks if the caller holds one of the allowed roles.

    Usage:
        @router.post("/admin-only")
        def admin_endpoint(principal: Principal = Depends(require_role([Role.ADMIN]))):
            ...
    """
    def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not principal.has_any(allowed_roles):
            logger.warning(
                f"Authorization failed for user={principal.user_id} "
                f"required={[r.value for r in allowed_roles]} roles={sorted(r.value for r in principal.roles)}"
            )
            raise ForbiddenError(f"Access denied. Required roles: {[r.value for r in allowed_roles]}")
        return principal
    return role_checker


def require_approver():
    """Shorthand for HR or admin."""
    return require_role([Role.HR, Role.ADMIN])


def require_admin():
    return require_role([Role.ADMIN])


def has_service_secret(request: Request) -> bool:
    """True when the request carries the configured service-to-service secret."""
    secret = settings.auth.webhook_secret
    if not secret:
        return False
    supplied = request.headers.get("X-Service-Secret") or request.headers.get("X-Service-Token")
    return bool(supplied) and hmac.compare_digest(supplied, secret)


def authorize_service_call(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Principal]:
    """
    Service-to-service secret first, otherwise a valid bearer token.
    Runs before the request body is validated, so unauthenticated callers get 401.
    """
    if has_service_secret(request):
        return None
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("unauthorized")
    return principal_from_claims(decode_access_token(credentials.credentials))
