"""Indexer for notes using SQLite with an FTS5 shadow table."""

import json
import os
from contextlib import ExitStack
from datetime import date, datetime, time
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import func, select, text

from zk_next import db
from zk_next.config import NotebookConfig
from zk_next.file_utils import ensure_directory
from zk_next.models import NoteRecord
from zk_next.note import Note

INSERT_NOTE = text("""
    INSERT INTO notes (id, path, metadata, title, body, filename)
    VALUES (:id, :path, :metadata, :title, :body, :filename)
""")

REPLACE_NOTE = text("""
    INSERT OR REPLACE INTO notes (id, path, metadata, title, body, filename)
    VALUES (:id, :path, :metadata, :title, :body, :filename)
""")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_key(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    if isinstance(key, (datetime, date, time)):
        return key.isoformat()
    return str(key)


def _stringify_keys(value: Any) -> Any:
    """Copy of value where every mapping key is valid JSON (YAML allows dates as keys)."""
    if isinstance(value, dict):
        return {_json_key(k): _stringify_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_stringify_keys(v) for v in value]
    return value


def serialize_metadata(metadata: Dict[str, Any]) -> str:
    """Compact JSON keeping key order; dates become ISO 8601 strings."""
    return json.dumps(
        _stringify_keys(metadata), separators=(",", ":"), ensure_ascii=False, default=_json_default
    )


def quote_search_terms(query: str) -> str:
    """Turn free text into an FTS5 query matching every word."""
    terms = [term.replace('"', '""') for term in query.split()]
    return " ".join(f'"{term}"' for term in terms)


class Indexer:
    """Owns the notebook database and keeps notes and notes_fts consistent.

    The database is created and migrated when the indexer is constructed.
    Use as a context manager, or call close() when done.
    """

    def __init__(self, config: NotebookConfig):
        self.config = config
        self.notebook_path = Path(config.notebook_path)
        self.db_path = config.database_path
        ensure_directory(self.db_path.parent)
        self._resources = ExitStack()
        self.engine, self.session_maker = self._resources.enter_context(
            db.engine_session_factory(self.db_path)
        )

    def relative_path(self, path: Path) -> str:
        """Path of a note relative to the notebook root, with forward slashes."""
        relative = os.path.relpath(os.path.abspath(path), self.notebook_path)
        return Path(relative).as_posix()

    def index_note(self, note: Note) -> None:
        """Insert or update a single note; safe to repeat for the same id."""
        relative_path = self.relative_path(note.path)
        params = {
            "id": note.id,
            "path": relative_path,
            "metadata": serialize_metadata(note.metadata),
            "title": None if note.title is None else str(note.title),
            "body": note.body,
            "filename": PurePath(relative_path).name,
        }

        with self.engine.begin() as connection:
            existing = connection.execute(
                text("SELECT 1 FROM notes WHERE id = :id"), {"id": note.id}
            ).first()
            if existing is None:
                connection.execute(INSERT_NOTE, params)
            else:
                # REPLACE deletes without firing fts_delete, so clear the shadow row first
                connection.execute(text("DELETE FROM notes_fts WHERE id = :id"), {"id": note.id})
                connection.execute(REPLACE_NOTE, params)
        logger.debug(f"indexed {note.id} ({relative_path})")

    def search(self, query: str, limit: Optional[int] = None, raw: bool = False) -> List[str]:
        """Ids of notes whose title, filename or body match query, best first.

        Args:
            query: Words to look for, or an FTS5 expression when raw is True
            limit: Maximum number of ids to return
            raw: Pass query to FTS5 unchanged
        """
        match = query if raw else quote_search_terms(query)
        if not match:
            return []
        sql = "SELECT id FROM notes_fts WHERE notes_fts MATCH :query ORDER BY rank"
        params: Dict[str, Any] = {"query": match}
        if limit is not None:
            sql += " LIMIT :limit"
            params["limit"] = limit
        logger.debug(f"Search query: {match}")
        with self.engine.connect() as connection:
            return [row.id for row in connection.execute(text(sql), params)]

    def get(self, note_id: str) -> Optional[NoteRecord]:
        """Primary-key lookup of an indexed note."""
        with db.scoped_session(self.session_maker) as session:
            return session.get(NoteRecord, note_id)

    def delete_note(self, note_id: str) -> bool:
        """Remove a note from the index; the delete trigger clears notes_fts."""
        with self.engine.begin() as connection:
            result = connection.execute(text("DELETE FROM notes WHERE id = :id"), {"id": note_id})
        return result.rowcount > 0

    def count(self) -> int:
        with db.scoped_session(self.session_maker) as session:
            return session.scalar(select(func.count()).select_from(NoteRecord)) or 0

    def close(self) -> None:
        self._resources.close()

    def __enter__(self) -> "Indexer":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
