"""Models package for zk-next."""

from zk_next.models.base import Base, SchemaVersion
from zk_next.models.note import NoteRecord
from zk_next.models.search import CREATE_SEARCH_INDEX, SEARCH_TABLE, TRIGGER_NAMES

__all__ = [
    "Base",
    "SchemaVersion",
    "NoteRecord",
    "CREATE_SEARCH_INDEX",
    "SEARCH_TABLE",
    "TRIGGER_NAMES",
]
