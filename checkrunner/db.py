"""Database engine and session factory."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from checkrunner.config import settings


def make_engine(url: str) -> Engine:
    """
    Engine for ``url``.

    Routing runs in background tasks on other threads, so SQLite connections
    are shared across threads; an in-memory SQLite database also needs a
    single pooled connection or every session would see an empty database.
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = make_engine(settings.db_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def get_db():
    """Request-scoped session; routes commit their own writes."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
