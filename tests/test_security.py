import time

import jwt
import pytest

from leaveservice.core.config import settings
from leaveservice.core.exceptions import AuthenticationError
from leaveservice.core.security import (
    Principal,
    Role,
    create_access_token,
    decode_access_token,
    normalize_roles,
    principal_from_claims,
)
from tests.conftest import EMPLOYEE_ID, HR_ID


@pytest.mark.parametrize("claims,expected", [
    ({}, {Role.EMPLOYEE}),
    ({"cognito:groups": ["HR"]}, {Role.EMPLOYEE, Role.HR}),
    ({"groups": ["hr_manager", "staff"]}, {Role.EMPLOYEE, Role.HR}),
    ({"roles": ["Admin"]}, {Role.EMPLOYEE, Role.ADMIN}),
    ({"role": "administrator"}, {Role.EMPLOYEE, Role.ADMIN}),
    ({"role": "hr, admin"}, {Role.EMPLOYEE, Role.HR, Role.ADMIN}),
    ({"roles": "unknown"}, {Role.EMPLOYEE}),
    ({"cognito:groups": ["hr"], "roles": ["super_admin"]}, {Role.EMPLOYEE, Role.HR, Role.ADMIN}),
])
def test_normalize_roles(claims, expected):
    assert normalize_roles(claims) == frozenset(expected)


def test_principal_flags():
    employee = Principal(EMPLOYEE_ID)
    hr = Principal(HR_ID, frozenset({Role.EMPLOYEE, Role.HR}))
    admin = Principal("root", frozenset({Role.ADMIN}))

    assert not employee.can_approve
    assert hr.can_approve and not hr.has_any([Role.ADMIN])
    assert admin.can_approve and admin.has_any([Role.ADMIN])


@pytest.mark.parametrize("claims,expected", [
    ({"sub": "abc"}, "abc"),
    ({"username": "jdoe"}, "jdoe"),
    ({"email": "jdoe@example.com"}, "jdoe@example.com"),
    ({"sub": "abc", "username": "jdoe"}, "abc"),
])
def test_principal_subject_fallback(claims, expected):
    assert principal_from_claims(claims).user_id == expected


def test_principal_requires_subject():
    with pytest.raises(AuthenticationError):
        principal_from_claims({"roles": ["hr"]})


def test_token_round_trip():
    token = create_access_token(HR_ID, roles=["hr"])
    principal = principal_from_claims(decode_access_token(token))
    assert principal.user_id == HR_ID
    assert principal.can_approve


def test_tampered_token_rejected():
    token = create_access_token(EMPLOYEE_ID, roles=["employee"])
    forged = jwt.encode({"sub": EMPLOYEE_ID, "roles": ["admin"]}, "some-other-secret-of-enough-length", algorithm="HS256")
    header, _, signature = token.split(".")
    escalated = forged.split(".")[1]
    with pytest.raises(AuthenticationError):
        decode_access_token(".".join([header, escalated, signature]))
    with pytest.raises(AuthenticationError):
        decode_access_token(forged)


def test_expired_token_rejected():
    token = create_access_token(EMPLOYEE_ID, exp=int(time.time()) - 60)
    with pytest.raises(AuthenticationError) as exc:
        decode_access_token(token)
    assert exc.value.message == "TOKEN_EXPIRED"


def test_garbage_token_rejected():
    with pytest.raises(AuthenticationError):
        decode_access_token("not-a-token")


def test_unverified_mode_skips_signature(monkeypatch):
    monkeypatch.setattr(settings.auth, "allow_unverified_jwt", True)
    forged = jwt.encode({"sub": EMPLOYEE_ID, "groups": ["hr"]}, "some-other-secret-of-enough-length", algorithm="HS256")
    principal = principal_from_claims(decode_access_token(forged))
    assert principal.user_id == EMPLOYEE_ID
    assert Role.HR in principal.roles
