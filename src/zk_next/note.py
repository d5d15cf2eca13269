"""Note documents read from markdown files."""

from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from zk_next.exceptions import MissingPathError
from zk_next.file_utils import parse_frontmatter
from zk_next.utils import generate_id


class Document:
    """Base class for everything stored in a notebook.

    Pass an existing id to keep it, or leave it out to get a fresh one.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
        title: Optional[str] = None,
        type: Optional[str] = None,
        date: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
        body: Optional[str] = None,
    ):
        self.id = id or self.generate_id()
        self.path = Path(path) if path is not None else None
        self.title = title
        self.type = type
        self.date = date
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.body = body

    @staticmethod
    def generate_id() -> str:
        return generate_id()

    @property
    def content(self) -> Optional[str]:
        """The text after the front matter block."""
        return self.body

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id='{self.id}', path='{self.path}')"


class Note(Document):
    """A note parsed from a markdown file with optional YAML front matter.

    Explicit arguments win over front matter values. Metadata passed in is
    merged underneath the file's own front matter.

    Raises:
        MissingPathError: If no path is given
        ParseError: If the front matter block is malformed
        OSError: If the file cannot be read
    """

    # Type assumed when the front matter does not name one
    note_type: Optional[str] = None

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        id: Optional[str] = None,
        title: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        if path is None:
            raise MissingPathError()

        path = Path(path)
        file_metadata, body = parse_frontmatter(path.read_text(encoding="utf-8"))
        merged = {**(metadata or {}), **file_metadata}

        file_id = merged.get("id")
        super().__init__(
            id=id or (str(file_id) if file_id not in (None, "") else None),
            path=path,
            title=title or merged.get("title"),
            type=merged.get("type") or self.note_type,
            date=merged.get("date"),
            metadata=merged,
            body=body,
        )


class Journal(Note):
    """A dated journal entry."""

    note_type = "journal"


class Meeting(Note):
    """Notes from a meeting, with an optional ``attendees`` list."""

    note_type = "meeting"

    @property
    def attendees(self) -> List[str]:
        attendees = self.metadata.get("attendees") or []
        if isinstance(attendees, str):
            return [a.strip() for a in attendees.split(",") if a.strip()]
        return [str(a) for a in attendees]


NOTE_TYPES: Dict[str, Type[Note]] = {
    Journal.note_type: Journal,
    Meeting.note_type: Meeting,
}


def note_class(type_name: Optional[str]) -> Type[Note]:
    """Note subclass for a template type, ``Note`` for anything else."""
    return NOTE_TYPES.get(type_name or "", Note)
