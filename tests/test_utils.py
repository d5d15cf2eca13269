"""Tests for slugify, id generation, patterns and template lookup."""

import re
from datetime import datetime
from pathlib import Path

import pytest
from loguru import logger

from zk_next.utils import (
    current_time_vars,
    find_template_file,
    format_tags,
    generate_id,
    interpolate_pattern,
    parse_tags,
    setup_logging,
    slugify,
    template_search_paths,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Meeting: Q1 Review", "meeting-q1-review"),
        ("Test & Review - Final", "test-review-final"),
        ("Hello World", "hello-world"),
        ("Café Crème", "cafe-creme"),
        ("  --Hello--  ", "hello"),
        ("already_snake-case", "already_snake-case"),
        ("", ""),
    ],
)
def test_slugify(text, expected):
    assert slugify(text) == expected


def test_slugify_custom_replacement():
    assert slugify("Meeting: Q1 Review", replacement="_") == "meeting_q1_review"
    assert slugify("a  b", replacement=".") == "a.b"


def test_slugify_none():
    assert slugify(None) == ""


def test_generate_id():
    first = generate_id()
    assert re.fullmatch(r"[0-9a-f]{8}", first)
    assert first != generate_id()
    assert len(generate_id(5)) == 5


def test_current_time_vars():
    now = datetime(2025, 1, 23, 10, 30)
    variables = current_time_vars(now=now)

    assert variables["date"] == "2025-01-23"
    assert variables["year"] == "2025"
    assert variables["month"] == "01"
    assert re.fullmatch(r"[0-9a-f]{8}", variables["id"])


def test_current_time_vars_date_format():
    variables = current_time_vars("%d.%m.%Y", now=datetime(2025, 1, 23))
    assert variables["date"] == "23.01.2025"


def test_interpolate_pattern():
    variables = {"type": "note", "date": "2025-01-23", "title": None}
    assert interpolate_pattern("{type}-{date}.md", variables) == "note-2025-01-23.md"
    assert interpolate_pattern("{title}x", variables) == "x"


def test_interpolate_pattern_leaves_unknown_placeholders():
    assert interpolate_pattern("{type}/{missing}", {"type": "note"}) == "note/{missing}"


def test_parse_tags():
    assert parse_tags("a, b,,c ") == ["a", "b", "c"]
    assert parse_tags(None) == []
    assert parse_tags(["x", " y ", ""]) == ["x", "y"]


def test_format_tags():
    assert format_tags(["a", "b"]) == '["a", "b"]'
    assert format_tags([]) == "[]"


def test_find_template_file_prefers_notebook(tmp_path: Path):
    notebook = tmp_path / "nb"
    global_dir = tmp_path / "global"
    local_file = notebook / ".zk" / "templates" / "note.j2"
    local_file.parent.mkdir(parents=True)
    local_file.write_text("local")
    global_dir.mkdir()
    (global_dir / "note.j2").write_text("global")

    assert find_template_file(notebook, "note.j2", global_dir) == local_file


def test_find_template_file_falls_back_to_global(tmp_path: Path):
    global_dir = tmp_path / "global"
    global_dir.mkdir()
    (global_dir / "note.j2").write_text("global")

    assert find_template_file(tmp_path / "nb", "note.j2", global_dir) == global_dir / "note.j2"


def test_find_template_file_missing(tmp_path: Path):
    assert find_template_file(tmp_path / "nb", "note.j2", tmp_path / "global") is None


def test_template_search_paths(tmp_path: Path):
    assert template_search_paths(tmp_path / "nb", "x.j2", tmp_path / "g") == [
        tmp_path / "nb" / ".zk" / "templates" / "x.j2",
        tmp_path / "g" / "x.j2",
    ]


def test_setup_logging_file_sink(tmp_path: Path):
    log_file = tmp_path / "logs" / "zkn.log"
    setup_logging(log_file=log_file)

    logger.debug("written to the file only")

    assert "written to the file only" in log_file.read_text(encoding="utf-8")
