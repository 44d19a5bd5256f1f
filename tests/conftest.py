import pytest
import os
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ALLOW_UNVERIFIED_JWT"] = "false"

from leaveservice.database import Base, build_session_factory, create_db_engine, get_session_factory
from leaveservice.main import app
from leaveservice.core.security import create_access_token
from leaveservice.models.leave_balance import LeaveBalance
from leaveservice.services import balance_ledger, policy_store
from leaveservice.services.leave_engine import LeaveEngine
from leaveservice.services.provisioning import ProvisioningService
from fastapi.testclient import TestClient

EMPLOYEE_ID = "7d3c1f4e-0a52-4b7e-9c1e-2f9d8a6b5c01"
OTHER_EMPLOYEE_ID = "1b2a3c4d-5e6f-4a1b-8c9d-0e1f2a3b4c5d"
HR_ID = "9f8e7d6c-5b4a-4c3d-8e2f-1a0b9c8d7e6f"
ADMIN_ID = "0a1b2c3d-4e5f-4a6b-9c7d-8e9f0a1b2c3d"


@pytest.fixture(scope="function")
def db_engine():
    """SQLite in-memory database, fresh schema per test."""
    engine = create_db_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return build_session_factory(db_engine)


@pytest.fixture(scope="function")
def leave_engine(session_factory):
    return LeaveEngine(session_factory)


@pytest.fixture(scope="function")
def provisioning(session_factory):
    return ProvisioningService(session_factory)


@pytest.fixture(scope="function")
def annual_policy(session_factory):
    with session_factory.begin() as db:
        policy = policy_store.create_policy(db, "Annual Leave", "annual", 21, carry_forward=True)
    return policy


@pytest.fixture(scope="function")
def sick_policy(session_factory):
    with session_factory.begin() as db:
        policy = policy_store.create_policy(db, "Sick Leave", "sick", 10)
    return policy


@pytest.fixture(scope="function")
def make_policy(session_factory):
    """Helper fixture to create a policy with a given allocation."""
    def _make_policy(name, max_days, leave_type="casual"):
        with session_factory.begin() as db:
            return policy_store.create_policy(db, name, leave_type, max_days)
    return _make_policy


@pytest.fixture(scope="function")
def fetch_balance(session_factory):
    """Read a balance through a fresh session so assertions see committed state only."""
    def _fetch_balance(user_id, policy_id, year):
        with session_factory() as db:
            return balance_ledger.get_balance(db, user_id, policy_id, year)
    return _fetch_balance


@pytest.fixture(scope="function")
def balance_rows(session_factory):
    """All balance rows, for invariant checks."""
    def _balance_rows():
        with session_factory() as db:
            return list(db.query(LeaveBalance).all())
    return _balance_rows


@pytest.fixture(scope="function")
def auth_headers():
    """Helper fixture to create bearer headers for a user with roles."""
    def _auth_headers(user_id, roles=()):
        token = create_access_token(user_id, roles=list(roles))
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(session_factory):
    """Get a TestClient that uses the test database via dependency override."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
