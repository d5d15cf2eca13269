"""Tests for the note index and full text search."""

import json
from datetime import date

import pytest
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from zk_next.config import NotebookConfig
from zk_next.indexer import Indexer, quote_search_terms, serialize_metadata
from zk_next.note import Note


@pytest.fixture
def notebook_root(tmp_path):
    root = tmp_path / "notebook"
    root.mkdir()
    return root


@pytest.fixture
def indexer(notebook_root):
    with Indexer(NotebookConfig(notebook_path=notebook_root)) as indexer:
        yield indexer


def note_text(note_id, title, body):
    return f"---\nid: {note_id}\ntitle: {title}\n---\n{body}\n"


def test_database_created_under_notebook(notebook_root, indexer):
    assert (notebook_root / ".zk" / "index.db").is_file()


def test_index_and_get(notebook_root, indexer, write_file):
    path = write_file(
        notebook_root / "first.md",
        "---\nid: n1\ntitle: Hello\ndate: 2025-01-23\n---\nSome body\n",
    )

    indexer.index_note(Note(path=path))
    record = indexer.get("n1")

    assert record.path == "first.md"
    assert record.filename == "first.md"
    assert record.title == "Hello"
    assert record.body == "\nSome body\n"
    assert record.metadata_ == '{"id":"n1","title":"Hello","date":"2025-01-23"}'
    assert record.note_metadata == {"id": "n1", "title": "Hello", "date": "2025-01-23"}


def test_get_unknown_id(indexer):
    assert indexer.get("missing") is None


def test_relative_path_in_subdirectory(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "sub" / "dir" / "deep.md", note_text("d1", "Deep", "x"))

    indexer.index_note(Note(path=path))

    record = indexer.get("d1")
    assert record.path == "sub/dir/deep.md"
    assert record.filename == "deep.md"


def test_note_without_title(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "plain.md", "---\nid: p1\n---\nplain text\n")

    indexer.index_note(Note(path=path))

    assert indexer.get("p1").title is None
    assert indexer.search("plain") == ["p1"]


def test_index_is_idempotent(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "a.md", note_text("n1", "Alpha", "hello world"))

    indexer.index_note(Note(path=path))
    indexer.index_note(Note(path=path))

    assert indexer.count() == 1
    with indexer.engine.connect() as connection:
        shadow = connection.execute(text("SELECT COUNT(*) FROM notes_fts WHERE id = 'n1'"))
        assert shadow.scalar() == 1
    assert indexer.search("hello") == ["n1"]


def test_update_replaces_search_terms(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "a.md", note_text("n1", "Note", "alpha"))
    indexer.index_note(Note(path=path))

    write_file(path, note_text("n1", "Note", "beta"))
    indexer.index_note(Note(path=path))

    assert indexer.search("alpha") == []
    assert indexer.search("beta") == ["n1"]
    assert indexer.get("n1").body == "\nbeta\n"


def test_delete_note(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "a.md", note_text("n1", "Note", "doomed"))
    indexer.index_note(Note(path=path))

    assert indexer.delete_note("n1") is True
    assert indexer.delete_note("n1") is False
    assert indexer.get("n1") is None
    assert indexer.search("doomed") == []


def test_search_matches_several_notes(notebook_root, indexer, write_file):
    for note_id in ("n1", "n2"):
        path = write_file(notebook_root / f"{note_id}.md", note_text(note_id, "T", "hello world"))
        indexer.index_note(Note(path=path))

    assert sorted(indexer.search("hello world")) == ["n1", "n2"]
    assert len(indexer.search("hello", limit=1)) == 1


def test_search_title_and_filename(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "meeting-notes.md", note_text("m1", "Quarterly", "body"))
    indexer.index_note(Note(path=path))

    assert indexer.search("quarterly") == ["m1"]
    assert indexer.search("meeting") == ["m1"]


def test_search_unicode(notebook_root, indexer, write_file):
    content = note_text("u1", "Dessert", "Café crème brûlée")
    path = write_file(notebook_root / "food.md", content)
    indexer.index_note(Note(path=path))

    assert indexer.search("crème") == ["u1"]
    assert indexer.search("brûlée") == ["u1"]


def test_search_raw_prefix_query(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "a.md", note_text("n1", "Note", "hello"))
    indexer.index_note(Note(path=path))

    assert indexer.search("hel*", raw=True) == ["n1"]


def test_search_empty_query(indexer):
    assert indexer.search("   ") == []


def test_existing_database_is_reused(notebook_root, write_file):
    config = NotebookConfig(notebook_path=notebook_root)
    path = write_file(notebook_root / "a.md", note_text("n1", "Note", "persisted"))
    with Indexer(config) as first:
        first.index_note(Note(path=path))

    with Indexer(config) as second:
        assert second.search("persisted") == ["n1"]


def test_quote_search_terms():
    assert quote_search_terms("hello world") == '"hello" "world"'
    assert quote_search_terms('say "hi"') == '"say" """hi"""'


def test_serialize_metadata_is_compact():
    serialized = serialize_metadata({"b": 1, "a": ["x", "é"]})
    assert serialized == '{"b":1,"a":["x","é"]}'
    assert json.loads(serialized) == {"b": 1, "a": ["x", "é"]}


def test_serialize_metadata_stringifies_keys():
    metadata = {date(2024, 1, 1): "start", 2: {date(2024, 2, 1): ["x"]}, None: True}

    assert json.loads(serialize_metadata(metadata)) == {
        "2024-01-01": "start",
        "2": {"2024-02-01": ["x"]},
        "null": True,
    }


def test_index_note_with_date_keys(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "dated.md", "---\nid: d1\n2024-01-01: start\n---\nbody\n")

    indexer.index_note(Note(path=path))

    assert indexer.get("d1").note_metadata == {"id": "d1", "2024-01-01": "start"}


def test_failed_update_keeps_previous_row(notebook_root, indexer, write_file):
    path = write_file(notebook_root / "a.md", note_text("n1", "Note", "alpha"))
    indexer.index_note(Note(path=path))
    with indexer.engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TRIGGER block_insert BEFORE INSERT ON notes "
                "BEGIN SELECT RAISE(ABORT, 'blocked'); END"
            )
        )

    write_file(path, note_text("n1", "Note", "beta"))
    with pytest.raises(DBAPIError, match="blocked"):
        indexer.index_note(Note(path=path))

    assert indexer.search("alpha") == ["n1"]
    assert indexer.search("beta") == []
    assert "alpha" in indexer.get("n1").body
