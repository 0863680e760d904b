"""
Campaign database.
One SQLite file beside this module unless DATABASE_URL points elsewhere (e.g. a hosted Postgres).
"""

import os
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

DEFAULT_DB_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "campaigns.db")


def resolve_database_url(raw: str | None) -> str:
    """Normalize a configured URL; None means the local SQLite file."""
    if not raw:
        return f"sqlite:///{DEFAULT_DB_FILE}"
    # Hosted Postgres often hands out postgres://, which SQLAlchemy 2.x no longer accepts
    if raw.startswith("postgres://"):
        return "postgresql://" + raw[len("postgres://"):]
    return raw


DATABASE_URL = resolve_database_url(os.environ.get("DATABASE_URL"))

# Request handlers run in a threadpool; SQLite connections must be shareable across it
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for code outside a request (WebSocket handshakes, admin scripts)."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    with session_scope() as session:
        yield session


def get_db_file_path() -> str | None:
    """Filesystem path of the SQLite database, or None for a server database."""
    prefix = "sqlite:///"
    return DATABASE_URL[len(prefix):] if DATABASE_URL.startswith(prefix) else None


def init_db() -> None:
    """Create the players and campaigns tables if they are missing."""
    from regional_factions.api import models  # noqa: F401  (registers tables on Base)
    Base.metadata.create_all(bind=engine)
