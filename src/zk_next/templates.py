"""Rendering of note templates with Jinja2."""

from functools import partial
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, TemplateError as JinjaTemplateError, Undefined
from loguru import logger

from zk_next.exceptions import TemplateRenderError
from zk_next.utils import slugify


class TemplateRenderer:
    """Renders template text with note variables and a ``slugify`` helper.

    Undefined variables render as empty strings so that optional values such
    as ``title`` may be left out.
    """

    def __init__(self, slugify_replacement: str = "-"):
        self.env = Environment(
            keep_trailing_newline=True,
            undefined=Undefined,
            autoescape=False,
        )
        self.env.globals["slugify"] = partial(slugify, replacement=slugify_replacement)
        self.env.filters["slugify"] = partial(slugify, replacement=slugify_replacement)

    def render(self, template_text: str, variables: Mapping[str, Any]) -> str:
        """Render template_text with variables.

        Raises:
            TemplateRenderError: If the template has a syntax error or fails to render
        """
        try:
            template = self.env.from_string(template_text)
            return template.render(**variables)
        except JinjaTemplateError as e:
            logger.debug(f"Template rendering failed: {e}")
            raise TemplateRenderError(f"Failed to render template: {e}") from e

    def render_file(self, template_file: Path, variables: Mapping[str, Any]) -> str:
        return self.render(template_file.read_text(encoding="utf-8"), variables)
