import logging
from typing import Any, Mapping

from db import repository as repo
from logbook.schema import InvalidEntryError, parse_entry


logger = logging.getLogger(__name__)


def log_entry(payload: Mapping[str, Any]):
    """
    Validate and persist one medication dose or symptom occurrence.

    Parameters:
        payload: Serialized entry (``type`` plus variant fields). ``id`` is
            generated when absent.

    Returns:
        The stored entry model.

    Raises:
        InvalidEntryError: if the payload is malformed or the id is taken.
    """
    entry = parse_entry(dict(payload))
    if repo.get_entry(entry.id) is not None:
        raise InvalidEntryError(f"Duplicate entry id: {entry.id}")

    try:
        repo.add_entry(entry)
    except Exception as exc:
        logger.error("Failed to log %s entry: %s", entry.type, exc)
        raise

    logger.info("Logged %s entry %s", entry.type, entry.id)
    return entry


def delete_entry(entry_id: str) -> bool:
    """Remove one entry; returns ``False`` when it did not exist."""

    deleted = repo.delete_entry(entry_id)
    if deleted:
        logger.info("Deleted entry %s", entry_id)
    return deleted
