"""
Database connection and session management
"""

from pathlib import Path
from typing import Generator

from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from loguru import logger as log

from common import global_config


def _engine_kwargs(database_uri: str) -> dict:
    url = make_url(database_uri)
    if url.get_backend_name() == "sqlite":
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        # Sessions are used from FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_recycle": 300}


# Database engine
engine = create_engine(
    global_config.database_uri,
    echo=False,  # Set to True for SQL query logging
    **_engine_kwargs(global_config.database_uri),
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db() -> None:
    """Create any missing tables (development convenience; Alembic owns migrations)."""
    from src.db.models import Base

    Base.metadata.create_all(bind=engine)


def get_db_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency to get a database session.

    Yields:
        Database session
    """
    db_session = SessionLocal()
    try:
        yield db_session
    except Exception as e:
        if isinstance(e, HTTPException) and e.status_code < 500:
            log.warning(f"Database session raised HTTP {e.status_code}: {e.detail}")
        else:
            log.error(f"Database session error: {e}")
        db_session.rollback()
        raise
    finally:
        db_session.close()
