"""
Thin CRUD wrapper around SQLAlchemy sessions.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from db.engine import database_path, get_engine, init_db
from db.models import LogEntryORM
from logbook.schema import LogType, ensure_unique_ids, parse_entry, parse_timestamp

logger = logging.getLogger(__name__)

_engine = None
_SessionLocal = None
_engine_path: Optional[Path] = None

_VARIANT_COLUMNS = {
    LogType.medication.value: ("medication_name", "dosage"),
    LogType.symptom.value: ("description", "severity"),
}


@contextmanager
def session_scope():
    """
    Provide a transactional database session scoped to the current engine.

    If the resolved database file changes (``DOSELOG_DB_PATH`` or the working
    directory), the engine and session factory are rebuilt and the tables
    created before a session is yielded. Commits on success, rolls back and
    re-raises on error, and always closes the session.
    """
    global _engine, _SessionLocal, _engine_path

    desired_path = database_path()
    if _engine is None or desired_path != _engine_path:
        _engine = init_db(get_engine(desired_path))
        _SessionLocal = sessionmaker(bind=_engine, expire_on_commit=False)
        _engine_path = desired_path
        logger.info("Using log database at %s", desired_path)

    db = _SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def _to_row(entry) -> LogEntryORM:
    return LogEntryORM(**entry.model_dump())


def _from_row(row: LogEntryORM):
    data = {
        "id": row.id,
        "type": row.type,
        "timestamp": row.timestamp,
        "notes": row.notes,
    }
    for column in _VARIANT_COLUMNS.get(row.type, ()):
        data[column] = getattr(row, column)
    return parse_entry(data)

# ---------- CRUD -----------------------------------------------------

def add_entry(entry) -> None:
    """Persist a log entry."""
    with session_scope() as db:
        db.add(_to_row(entry))


def list_entries(since: Optional[datetime] = None) -> List:
    """
    List stored entries in storage order (not necessarily chronological).

    Args:
        since: If provided, only return entries with timestamp >= since.
    """
    with session_scope() as db:
        q = select(LogEntryORM)
        if since is not None:
            q = q.where(LogEntryORM.timestamp >= parse_timestamp(since))
        return [_from_row(row) for row in db.scalars(q)]


def get_entry(entry_id: str):
    with session_scope() as db:
        row = db.get(LogEntryORM, entry_id)
        return _from_row(row) if row else None


def delete_entry(entry_id: str) -> bool:
    """Delete one entry; ``False`` when no entry has that id."""
    with session_scope() as db:
        row = db.get(LogEntryORM, entry_id)
        if row is None:
            return False
        db.delete(row)
        return True


def clear_entries() -> int:
    with session_scope() as db:
        result = db.execute(delete(LogEntryORM))
        return result.rowcount or 0


def replace_entries(entries: Iterable) -> int:
    """Overwrite the whole store with ``entries`` in one transaction."""
    items = list(entries)
    ensure_unique_ids(items)
    with session_scope() as db:
        db.execute(delete(LogEntryORM))
        db.add_all(_to_row(e) for e in items)
    return len(items)
