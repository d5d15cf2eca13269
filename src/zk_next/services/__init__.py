"""Services for zk-next."""

from zk_next.services.note_service import NoteService
from zk_next.services.reindex_service import ReindexReport, ReindexService

__all__ = ["NoteService", "ReindexReport", "ReindexService"]
