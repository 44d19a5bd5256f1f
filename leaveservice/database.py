from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from leaveservice.core.config import settings

Base = declarative_base()


def _serialize_sqlite_transactions(engine: Engine):
    """
    SQLite renders no FOR UPDATE and pysqlite defers BEGIN until the first
    write. Take the database write lock when each transaction starts so that
    locked reads in the lifecycle are serialized like row locks.
    """
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Build an engine for PostgreSQL (production) or SQLite (local development/testing)."""
    if database_url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine = create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)
        _serialize_sqlite_transactions(engine)
        return engine
    return create_engine(database_url, echo=echo, pool_pre_ping=True, **kwargs)


def build_session_factory(bind: Engine) -> sessionmaker:
    # Objects stay readable after the per-call transaction commits
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=bind)


engine = create_db_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = build_session_factory(engine)


def get_session_factory() -> sessionmaker:
    """
    Connection-pool handle provider.
    Services open one transaction per call from this factory.
    """
    return SessionLocal


def init_db(bind: Engine = None):
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from leaveservice.models import leave_policy, leave_balance, leave_request, leave_audit  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
