"""JSON export / import of the whole log."""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List

from db import repository as repo
from logbook.schema import InvalidEntryError, parse_entries, serialise_entry

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "medication-logs.json"


def export_entries(entries: Iterable) -> str:
    """Serialise ``entries`` as a pretty-printed JSON array."""
    return json.dumps([serialise_entry(e) for e in entries], indent=2)


def import_entries(text: str | bytes) -> List:
    """
    Parse an exported file back into entries.

    Raises:
        InvalidEntryError: when the text is not a JSON array of valid
            entries with unique ids.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise InvalidEntryError(f"Invalid file format: {exc}") from exc
    return load_entries(data)


def load_entries(data: Any) -> List:
    """Validate already-decoded export data (a list of entry dicts)."""
    if not isinstance(data, list):
        raise InvalidEntryError("Invalid file format: Data is not an array.")
    return parse_entries(data)


def restore(entries: Iterable) -> int:
    """Replace every stored entry with ``entries``."""
    count = repo.replace_entries(entries)
    logger.info("Imported %s entries, previous log overwritten", count)
    return count
