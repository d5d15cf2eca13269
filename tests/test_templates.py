"""Tests for template rendering."""

import pytest

from zk_next.exceptions import TemplateRenderError
from zk_next.templates import TemplateRenderer


def test_render_variables():
    renderer = TemplateRenderer()
    assert renderer.render("{{ type }}: {{ title }}", {"type": "note", "title": "Hi"}) == "note: Hi"


def test_undefined_variables_render_empty():
    assert TemplateRenderer().render("[{{ missing }}]", {}) == "[]"


def test_keeps_trailing_newline():
    assert TemplateRenderer().render("line\n", {}) == "line\n"


def test_slugify_helper():
    renderer = TemplateRenderer()
    variables = {"title": "Meeting: Q1 Review"}

    assert renderer.render("{{ slugify(title) }}", variables) == "meeting-q1-review"
    assert renderer.render("{{ title | slugify }}", variables) == "meeting-q1-review"


def test_slugify_uses_configured_replacement():
    renderer = TemplateRenderer(slugify_replacement="_")
    assert renderer.render("{{ slugify(title) }}", {"title": "Q1 Review"}) == "q1_review"


def test_no_html_escaping():
    assert TemplateRenderer().render("{{ title }}", {"title": "a & <b>"}) == "a & <b>"


def test_syntax_error():
    with pytest.raises(TemplateRenderError):
        TemplateRenderer().render("{% if %}", {})


def test_render_file(tmp_path):
    template = tmp_path / "note.j2"
    template.write_text("# {{ title }}\n", encoding="utf-8")

    assert TemplateRenderer().render_file(template, {"title": "Hello"}) == "# Hello\n"
