from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from leave_ledger.core.config import settings

# Durable substrate for the snapshot backend
DATABASE_URL = settings.database_url


def make_engine(url: str) -> Engine:
    if url.startswith("postgresql"):
        return create_engine(url)
    if ":memory:" in url:
        # One shared connection, otherwise every session sees an empty database
        return create_engine(
            url, connect_args={"check_same_thread": False}, poolclass=StaticPool
        )
    # SQLite configuration for local development/testing
    return create_engine(url, connect_args={"check_same_thread": False})


engine = make_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def init_db(bind: Engine = None):
    """
    Registers the snapshot model and creates its table if missing.
    Called during application startup when the snapshot backend is selected.
    """
    from leave_ledger.models import snapshot  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
