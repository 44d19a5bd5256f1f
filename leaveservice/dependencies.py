"""
Service providers and re-exported auth dependencies.

Routers depend on these instead of module-level globals so that tests can
swap the session factory with a single dependency override.
"""
from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from leaveservice.database import get_session_factory
from leaveservice.routers.auth_deps import (
    get_current_principal,
    require_role,
    require_approver,
    require_admin,
    has_service_secret,
    authorize_service_call,
)
from leaveservice.services.leave_engine import LeaveEngine
from leaveservice.services.provisioning import ProvisioningService


def get_db(session_factory: sessionmaker = Depends(get_session_factory)):
    """
    Session Provider: Provides a database session per request.
    Routers that write through it commit explicitly.
    """
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def get_leave_engine(session_factory: sessionmaker = Depends(get_session_factory)) -> LeaveEngine:
    return LeaveEngine(session_factory)


def get_provisioning_service(session_factory: sessionmaker = Depends(get_session_factory)) -> ProvisioningService:
    return ProvisioningService(session_factory)


__all__ = [
    "get_db",
    "get_leave_engine",
    "get_provisioning_service",
    "get_current_principal",
    "require_role",
    "require_approver",
    "require_admin",
    "has_service_secret",
    "authorize_service_call",
]
