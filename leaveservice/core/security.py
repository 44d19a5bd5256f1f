"""
Bearer-token decoding and claims normalization.

Identity providers disagree on where roles live (`cognito:groups`, `groups`,
`roles`, `role`) and on whether they are a list or a single string. Everything
is folded here into a fixed frozenset of Role values so that routers and
services never look at raw claims.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

import jwt

from leaveservice.core.config import settings
from leaveservice.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ROLE_CLAIMS = ("cognito:groups", "groups", "roles", "role")
SUBJECT_CLAIMS = ("sub", "username", "email")


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    HR = "hr"
    ADMIN = "admin"


# Role names seen in tokens, lower-cased, mapped onto our roles
_ROLE_ALIASES = {
    "employee": Role.EMPLOYEE,
    "user": Role.EMPLOYEE,
    "hr": Role.HR,
    "hr_admin": Role.HR,
    "hr_manager": Role.HR,
    "hr_staff": Role.HR,
    "admin": Role.ADMIN,
    "admins": Role.ADMIN,
    "administrator": Role.ADMIN,
    "super_admin": Role.ADMIN,
}

APPROVER_ROLES = frozenset({Role.HR, Role.ADMIN})


@dataclass(frozen=True)
class Principal:
    user_id: str
    roles: FrozenSet[Role] = field(default_factory=lambda: frozenset({Role.EMPLOYEE}))

    @property
    def can_approve(self) -> bool:
        return bool(self.roles & APPROVER_ROLES)

    def has_any(self, roles: Iterable[Role]) -> bool:
        return bool(self.roles & frozenset(roles))


def normalize_roles(claims: Dict[str, Any]) -> FrozenSet[Role]:
    roles = {Role.EMPLOYEE}
    for claim in ROLE_CLAIMS:
        raw = claims.get(claim)
        if raw is None:
            continue
        values = raw if isinstance(raw, (list, tuple, set)) else str(raw).split(",")
        for value in values:
            role = _ROLE_ALIASES.get(str(value).strip().lower())
            if role is not None:
                roles.add(role)
    return frozenset(roles)


def principal_from_claims(claims: Dict[str, Any]) -> Principal:
    user_id = next((str(claims[c]) for c in SUBJECT_CLAIMS if claims.get(c)), None)
    if not user_id:
        raise AuthenticationError("Missing subject in token")
    return Principal(user_id=user_id, roles=normalize_roles(claims))


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a bearer token. Raises AuthenticationError on any failure."""
    auth = settings.auth
    try:
        if auth.allow_unverified_jwt:
            return jwt.decode(token, options={"verify_signature": False})
        options = {"verify_aud": auth.jwt_audience is not None}
        return jwt.decode(
            token,
            auth.jwt_secret,
            algorithms=auth.jwt_algorithms,
            audience=auth.jwt_audience,
            issuer=auth.jwt_issuer,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Authentication failed: Token expired")
        raise AuthenticationError("TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Authentication failed: {e}")
        raise AuthenticationError()


def create_access_token(user_id: str, roles: Optional[Iterable[str]] = None, **claims: Any) -> str:
    """Issue a signed token with the configured secret (scripts and tests)."""
    payload = {"sub": user_id, "roles": list(roles or []), **claims}
    return jwt.encode(payload, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithms[0])
