from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from usermgmt.core.config import settings


def _engine_options(url: str) -> dict:
    """Extra engine arguments for the configured backend"""
    if not url.startswith("sqlite"):
        # Drop stale MySQL connections instead of failing the request
        return {"pool_pre_ping": True}
    options = {"connect_args": {"check_same_thread": False}}
    # In-memory sqlite lives inside one connection, so every session must share it
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


DATABASE_URL = settings.get_database_url()

# Create database engine - manages the connection pool shared by all requests
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Session factory - each request gets its own session
# autocommit=False: changes require an explicit commit
# autoflush=False: pending objects are not flushed by lookups made before the commit
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """
    Dependency for getting database session.

    The session is closed after the request completes (via finally block),
    even if the handler raised.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
