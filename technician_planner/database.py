# technician_planner/database.py
"""Database engine, table bootstrap and per-request sessions using SQLModel."""

import logging

from fastapi import Request
from sqlalchemy.engine import Engine, make_url
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from technician_planner.config import Settings

logger = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> Engine:
    """Build the engine for ``settings.database_url``.

    SQLite connections are shared across FastAPI's worker threads, and an
    in-memory database must live on a single connection or every session
    would see its own empty copy.
    """
    url = make_url(settings.database_url)
    kwargs: dict = {"echo": False}
    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    logger.info("Using %s database", url.get_backend_name())
    return create_engine(url, **kwargs)


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables from SQLModel metadata."""
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """Yield a database session for FastAPI dependency injection."""
    with Session(request.app.state.engine) as session:
        yield session
