import logging
from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from sukejuru.config import app_cfg

logger = logging.getLogger(__name__)


def make_database_url():
    """
    Create database URL from configuration.

    Returns:
        Database URL string for SQLAlchemy
    """
    return app_cfg.DATABASE_URL


def make_engine(database_url: str):
    """
    Create the SQLAlchemy engine for the configured store.

    SQLite needs cross-thread access because FastAPI runs sync work in a
    threadpool; an in-memory SQLite database must also share one connection.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(database_url, pool_pre_ping=True)


db_engine = make_engine(make_database_url())
DatabaseSession = sessionmaker(bind=db_engine, expire_on_commit=False)

Base = declarative_base()


def contains_pattern(value: str) -> str:
    """LIKE pattern matching `value` anywhere, with wildcards in `value` escaped."""
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def create_tables():
    """Create every table registered on Base (no-op for existing tables)."""
    import sukejuru.db.models  # noqa: F401  registers all models on Base

    Base.metadata.create_all(bind=db_engine)


def db_connection_check():
    """
    Check if database connection is working.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with DatabaseSession() as db_session:
            db_session.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.warning(f"Database connection check failure: {e}")
        return False
