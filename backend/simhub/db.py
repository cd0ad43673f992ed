"""Database bootstrap for SQLModel storage.

This module exposes the shared SQLAlchemy engine, the per-request session
dependency, and table initialization used by FastAPI lifespan and tests.
"""

from pathlib import Path

from sqlalchemy import event
from sqlmodel import Session, SQLModel, create_engine

from .config import settings


def _ensure_sqlite_parent_dir(database_url: str) -> None:
    """Create local SQLite parent directory when file-based URL is used."""

    if not database_url.startswith("sqlite:///"):
        return
    raw_path = database_url[len("sqlite:///") :].split("?", 1)[0].strip()
    if not raw_path or raw_path == ":memory:" or raw_path.startswith("file:"):
        return
    db_path = Path(raw_path).expanduser()
    parent = db_path.parent
    if str(parent) and not parent.exists():
        parent.mkdir(parents=True, exist_ok=True)


def _build_engine(database_url: str):
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=False, pool_pre_ping=True)
    engine = create_engine(database_url, echo=False, connect_args={"check_same_thread": False})

    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


_ensure_sqlite_parent_dir(settings.database_url)
engine = _build_engine(settings.database_url)


def init_db() -> None:
    """Create all registered SQLModel tables."""

    from . import models  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
