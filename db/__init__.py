from .engine import Base, get_engine, init_db  # noqa: F401
from .repository import (  # noqa: F401
    add_entry,
    clear_entries,
    delete_entry,
    get_entry,
    list_entries,
    replace_entries,
)

__all__ = [
    "Base",
    "get_engine",
    "init_db",
    "add_entry",
    "list_entries",
    "get_entry",
    "delete_entry",
    "clear_entries",
    "replace_entries",
]
