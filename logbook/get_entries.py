from datetime import datetime
from typing import List, Optional

from db.repository import list_entries


def get_entries(since: Optional[datetime] = None) -> List:
    """Return stored log entries, optionally filtered by 'since' (UTC).

    Filtering is delegated to :func:`db.repository.list_entries` so that SQL handles it.
    The result is in storage order; aggregators sort for themselves.
    """

    return list_entries(since=since)
