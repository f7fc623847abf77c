"""Database initialization and utilities."""

from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

DEFAULT_DB_URL = "sqlite:///rota.db"


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False):
    """Create SQLAlchemy engine.

    In-memory SQLite shares a single connection across threads so that work
    pushed to worker threads sees the same database.
    """
    if db_url.startswith("sqlite") and ":memory:" in db_url:
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url, echo=echo)


def init_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Initialize database and create all tables."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    print(f"[INFO] Database initialized: {db_url}")


def get_session_factory(db_url: str = DEFAULT_DB_URL, engine=None):
    """Get a session factory for the database."""
    engine = engine if engine is not None else create_db_engine(db_url)
    return sessionmaker(bind=engine, expire_on_commit=False)


def get_session(db_url: str = DEFAULT_DB_URL) -> Session:
    """Get a new database session."""
    SessionFactory = get_session_factory(db_url)
    return SessionFactory()

