"""Primary table of indexed notes."""

import json
from typing import Any, Dict, Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from zk_next.models.base import Base


class NoteRecord(Base):
    """One row per note file, keyed by the note id."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Path relative to the notebook root
    path: Mapped[Optional[str]] = mapped_column(Text)
    # Note: 'metadata' is a reserved name in SQLAlchemy, so we use 'metadata_' and map to 'metadata'
    metadata_: Mapped[Optional[str]] = mapped_column("metadata", Text)
    title: Mapped[Optional[str]] = mapped_column(Text)
    body: Mapped[Optional[str]] = mapped_column(Text)
    filename: Mapped[Optional[str]] = mapped_column(Text)

    @property
    def note_metadata(self) -> Dict[str, Any]:
        """Stored metadata decoded from JSON."""
        return json.loads(self.metadata_) if self.metadata_ else {}

    def __repr__(self) -> str:
        return f"NoteRecord(id='{self.id}', path='{self.path}')"
