"""
Database module - SQLAlchemy engine, session factory and FastAPI dependency
"""
import logging
import os
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from scrs.core.config import settings

logger = logging.getLogger(__name__)

# SQLAlchemy Base for models
Base = declarative_base()


def create_db_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine; SQLite gets thread sharing and enforced foreign keys"""
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        db_path = database_url.replace("sqlite:///", "", 1)
        if db_path and db_path != database_url and db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = create_db_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Get database session - FastAPI dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables. Safe to call repeatedly."""
    # Import models so they register with Base.metadata
    import scrs.models  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("[DB] Tables ensured on %s", target.url)


__all__ = [
    "Base",
    "engine",
    "SessionLocal",
    "get_db",
    "init_db",
    "create_db_engine",
]
