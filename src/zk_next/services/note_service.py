"""Service for creating notes from templates."""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from loguru import logger

from zk_next.config import NotebookConfig, TemplateDefinition, ZkSettings, get_template
from zk_next.exceptions import (
    PathOutsideNotebookError,
    TemplateFileNotFoundError,
    TemplateNotFoundError,
)
from zk_next.file_utils import (
    dump_frontmatter,
    ensure_directory,
    parse_frontmatter,
    reformat_markdown,
    write_file_atomic,
)
from zk_next.indexer import Indexer
from zk_next.note import note_class
from zk_next.templates import TemplateRenderer
from zk_next.utils import (
    current_time_vars,
    find_template_file,
    format_tags,
    interpolate_pattern,
    template_search_paths,
)

# Front matter key holding per-note instructions, removed before the note is written
CONFIG_KEY = "config"

DEFAULT_TYPE = "note"


class NoteService:
    """Creates note files from templates and adds them to the index.

    Features:
    - Template lookup in the notebook, then in the user config directory
    - Filename and subdirectory patterns with ``{var}`` placeholders
    - Per-note path override through a ``config.path`` front matter entry
    """

    def __init__(self, config: NotebookConfig, settings: ZkSettings):
        self.config = config
        self.settings = settings
        self.renderer = TemplateRenderer(slugify_replacement=config.slugify_replacement)

    def resolve_template(self, type_name: str) -> tuple[TemplateDefinition, Path]:
        """Find the template definition and its body file.

        Raises:
            TemplateNotFoundError: If no template has this type
            TemplateFileNotFoundError: If the template file is in neither location
        """
        template = get_template(self.config, type_name)
        if template is None:
            raise TemplateNotFoundError(type_name)

        template_file = find_template_file(
            self.config.notebook_path, template.template_file, self.settings.global_templates_dir
        )
        if template_file is None:
            raise TemplateFileNotFoundError(
                template.template_file,
                template_search_paths(
                    self.config.notebook_path,
                    template.template_file,
                    self.settings.global_templates_dir,
                ),
            )
        return template, template_file

    def build_variables(
        self,
        type_name: str,
        title: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Variables exposed to the template and to path patterns."""
        variables: Dict[str, Any] = current_time_vars(self.config.date_format, now=now)
        variables["type"] = type_name
        variables["title"] = title or ""
        variables["aliases"] = interpolate_pattern(self.config.alias_pattern, variables)
        variables["tags"] = format_tags(tags or [])
        return variables

    def create_note(
        self,
        type_name: str = DEFAULT_TYPE,
        title: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        now: Optional[datetime] = None,
    ) -> Path:
        """Render a template into a new note file and index it.

        Returns:
            Path of the created note
        """
        template, template_file = self.resolve_template(type_name)
        variables = self.build_variables(type_name, title=title, tags=tags, now=now)

        content = self.renderer.render_file(template_file, variables)
        metadata, body = parse_frontmatter(content)

        path_override = None
        note_config = metadata.get(CONFIG_KEY)
        if isinstance(note_config, dict):
            path_override = note_config.get("path")
            del metadata[CONFIG_KEY]
            content = dump_frontmatter(metadata, reformat_markdown(body))

        if path_override:
            target = self.config.notebook_path / interpolate_pattern(str(path_override), variables)
        else:
            target = self.target_path(template, variables, metadata)
        self.check_inside_notebook(target)

        if target.exists():
            logger.warning(f"Overwriting existing note: {target}")
        ensure_directory(target.parent)
        write_file_atomic(target, content)
        logger.debug(f"Wrote note: {target}")

        with Indexer(self.config) as indexer:
            indexer.index_note(note_class(type_name)(path=target))
        return target

    def check_inside_notebook(self, target: Path) -> None:
        """Reject targets that resolve outside the notebook, such as absolute or `..` paths."""
        root = self.config.notebook_path.resolve()
        if not target.resolve().is_relative_to(root):
            raise PathOutsideNotebookError(target, self.config.notebook_path)

    def target_path(
        self,
        template: TemplateDefinition,
        variables: Dict[str, Any],
        metadata: Dict[str, Any],
    ) -> Path:
        """Notebook path built from the template's subdirectory and filename patterns."""
        pattern_vars = dict(variables)
        pattern_vars.update(
            (key, value)
            for key, value in metadata.items()
            if isinstance(value, (str, int, float)) and not isinstance(value, bool)
        )
        filename = interpolate_pattern(template.filename_pattern, pattern_vars)
        subdirectory = interpolate_pattern(template.subdirectory, pattern_vars)
        notebook_path = self.config.notebook_path
        target_dir = notebook_path / subdirectory if subdirectory else notebook_path
        return target_dir / filename
