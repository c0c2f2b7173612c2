"""SQLAlchemy engine utilities."""

import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase

DEFAULT_DB_FILE = "doselog.db"


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass


def database_path() -> Path:
    """Resolve the SQLite file from ``DOSELOG_DB_PATH`` or the working directory."""

    env_path = os.environ.get("DOSELOG_DB_PATH")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return (Path.cwd() / DEFAULT_DB_FILE).resolve()


def get_engine(db_path: Path | None = None) -> Engine:
    """Return an engine bound to ``db_path`` (default: :func:`database_path`)."""

    url = f"sqlite:///{db_path or database_path()}"
    return create_engine(
        url,
        connect_args={"check_same_thread": False},
        echo=False,
    )


_initialized_paths: set[Path] = set()


def init_db(engine: Engine | None = None) -> Engine:
    """Initialize database tables if they haven't been created."""

    if engine is None:
        engine = get_engine()

    db_path = Path(engine.url.database or "")
    if db_path not in _initialized_paths:
        from db import models  # noqa: F401 – side-effect import

        Base.metadata.create_all(engine)
        _initialized_paths.add(db_path)

    return engine
