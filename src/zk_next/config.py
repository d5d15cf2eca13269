"""Configuration management for zk-next.

Two layers of configuration exist: a global file under the user's config
home and a per-notebook file inside the notebook's ``.zk`` directory. The
notebook is located by walking up from the working directory, then by the
``ZKN_NOTEBOOK_PATH`` override, then by the ``notebook_path`` declared in the
global file. The more specific file wins key by key; values are never merged
below the top level.
"""

import os
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zk_next.exceptions import ConfigNotFoundError, ConfigParseError
from zk_next.utils import DEFAULT_DATE_FORMAT

APP_NAME = "zk-next"
MARKER_DIR_NAME = ".zk"
CONFIG_FILENAME = "config.yaml"
DATABASE_NAME = "index.db"
TEMPLATES_DIR_NAME = "templates"

DEFAULT_FILENAME_PATTERN = "{type}-{date}.md"
DEFAULT_TEMPLATE_SUFFIX = ".j2"
DEFAULT_ALIAS_PATTERN = "{type}> {date}: {title}"


class ZkSettings(BaseSettings):
    """Process-wide settings, read once from the environment at startup."""

    home: Path = Field(
        default_factory=Path.home,
        description="Home directory used for the global config and templates",
    )
    notebook_path: Optional[Path] = Field(
        default=None,
        description="Notebook to use when none is found above the working directory",
    )
    debug: bool = Field(default=False, description="Print diagnostic messages to stderr")
    log_level: str = Field(default="WARNING", description="Minimum level for stderr logging")
    log_file: Optional[Path] = Field(
        default=None, description="File receiving every log record, rotated at 10 MB"
    )

    model_config = SettingsConfigDict(
        env_prefix="ZKN_",
        extra="ignore",
        env_ignore_empty=True,
    )

    @property
    def config_dir(self) -> Path:
        """Get the user level configuration directory."""
        return self.home / ".config" / APP_NAME

    @property
    def global_config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    @property
    def global_templates_dir(self) -> Path:
        return self.config_dir / TEMPLATES_DIR_NAME


class ConfigSource(str, Enum):
    """Where the notebook configuration was found."""

    CWD = "cwd"
    ENV = "env"
    GLOBAL = "global"


class TemplateDefinition(BaseModel):
    """A named recipe for generating a note of a given type."""

    type: str
    template_file: Optional[str] = None
    filename_pattern: Optional[str] = None
    subdirectory: Optional[str] = None

    @field_validator("type", "template_file", "filename_pattern", "subdirectory", mode="before")
    @classmethod
    def coerce_scalar(cls, v: Any) -> Any:
        # YAML reads `subdirectory: 2024` as an int and `2024-01-01` as a date
        if isinstance(v, bool):
            return v
        if isinstance(v, (date, datetime)):
            return v.isoformat()
        if isinstance(v, (int, float)):
            return str(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        if not self.template_file:
            self.template_file = f"{self.type}{DEFAULT_TEMPLATE_SUFFIX}"
        if not self.filename_pattern:
            self.filename_pattern = DEFAULT_FILENAME_PATTERN
        if self.subdirectory is None:
            self.subdirectory = ""


def normalize_templates(templates: Any) -> List[TemplateDefinition]:
    """Validate template entries; entries that are not usable definitions are dropped."""
    if not isinstance(templates, list):
        if templates:
            logger.warning(f"Ignoring templates setting, expected a list: {templates!r}")
        return []

    valid: List[TemplateDefinition] = []
    for entry in templates:
        if isinstance(entry, TemplateDefinition):
            valid.append(entry)
            continue
        if not isinstance(entry, dict) or entry.get("type") is None:
            logger.warning(f"Ignoring template entry without a type: {entry!r}")
            continue
        try:
            valid.append(TemplateDefinition.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Ignoring invalid template entry {entry!r}: {e}")
    return valid


class NotebookConfig(BaseModel):
    """Resolved configuration for one notebook.

    Unknown keys from the config files are kept as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    notebook_path: Path
    templates: List[TemplateDefinition] = Field(default_factory=list)
    date_format: str = DEFAULT_DATE_FORMAT
    slugify_replacement: str = "-"
    alias_pattern: str = DEFAULT_ALIAS_PATTERN
    source: Optional[ConfigSource] = None

    @field_validator("notebook_path", mode="before")
    @classmethod
    def expand_notebook_path(cls, v: Any) -> Any:
        if isinstance(v, (str, Path)):
            return Path(os.path.abspath(os.path.expanduser(str(v))))
        return v

    @field_validator("templates", mode="before")
    @classmethod
    def validate_templates(cls, v: Any) -> List[TemplateDefinition]:
        return normalize_templates(v)

    @property
    def zk_dir(self) -> Path:
        return self.notebook_path / MARKER_DIR_NAME

    @property
    def database_path(self) -> Path:
        """Get SQLite database path."""
        return self.zk_dir / DATABASE_NAME

    @property
    def templates_dir(self) -> Path:
        return self.zk_dir / TEMPLATES_DIR_NAME

    def get(self, key: str, default: Any = None) -> Any:
        """Mapping style access covering declared fields and extra keys."""
        return getattr(self, key, default)


def get_template(
    config: Union[NotebookConfig, Mapping[str, Any]], type_name: str
) -> Optional[TemplateDefinition]:
    """Find the template definition for type_name, or None when there is none."""
    if isinstance(config, NotebookConfig):
        templates = config.templates
    else:
        templates = normalize_templates(config.get("templates"))
    for template in templates:
        if template.type == type_name:
            return template
    return None


def list_template_types(config: Union[NotebookConfig, Mapping[str, Any]]) -> List[str]:
    """Names of every configured template type, in config order."""
    if isinstance(config, NotebookConfig):
        return [t.type for t in config.templates]
    return [t.type for t in normalize_templates(config.get("templates"))]


def local_config_file(notebook_path: Path) -> Path:
    return Path(notebook_path) / MARKER_DIR_NAME / CONFIG_FILENAME


def default_notebook_config(notebook_path: Path) -> Dict[str, Any]:
    """Config written by ``zkn init`` for a fresh notebook."""
    return {
        "notebook_path": str(notebook_path),
        "templates": [
            {
                "type": "note",
                "template_file": f"default{DEFAULT_TEMPLATE_SUFFIX}",
                "filename_pattern": DEFAULT_FILENAME_PATTERN,
                "subdirectory": "",
            }
        ],
    }


class ConfigManager:
    """Resolves the notebook configuration for a working directory."""

    def __init__(self, settings: ZkSettings, cwd: Optional[Path] = None):
        self.settings = settings
        self.cwd = Path(os.path.abspath(cwd or Path.cwd()))

    def load(self) -> NotebookConfig:
        """Resolve and merge configuration.

        Returns:
            NotebookConfig with an absolute notebook_path

        Raises:
            ConfigNotFoundError: If no location produced a configuration
            ConfigParseError: If a config file exists but cannot be read
        """
        searched: List[Path] = []

        notebook_root = self._find_from_cwd(searched)
        if notebook_root is not None:
            return self._resolve_local(notebook_root, ConfigSource.CWD)

        if self.settings.notebook_path is not None:
            notebook_root = Path(os.path.abspath(os.path.expanduser(self.settings.notebook_path)))
            candidate = local_config_file(notebook_root)
            searched.append(candidate)
            logger.debug(f"Checking notebook override: {candidate}")
            if candidate.is_file():
                return self._resolve_local(notebook_root, ConfigSource.ENV)

        global_file = self.settings.global_config_file
        searched.append(global_file)
        logger.debug(f"Checking global config: {global_file}")
        if global_file.is_file():
            global_data = load_config_file(global_file)
            declared = global_data.get("notebook_path")
            if declared:
                return self._resolve_global(global_data, Path(str(declared)))
            logger.debug("Global config does not declare notebook_path")

        raise ConfigNotFoundError(searched)

    def _find_from_cwd(self, searched: List[Path]) -> Optional[Path]:
        """Walk up from cwd until the home directory or filesystem root."""
        home = Path(os.path.abspath(self.settings.home))
        directory = self.cwd
        while True:
            candidate = local_config_file(directory)
            searched.append(candidate)
            logger.debug(f"Checking for notebook config: {candidate}")
            if candidate.is_file():
                return directory
            if directory == home or directory.parent == directory:
                return None
            directory = directory.parent

    def _resolve_local(self, notebook_root: Path, source: ConfigSource) -> NotebookConfig:
        local_data = load_config_file(local_config_file(notebook_root))
        global_file = self.settings.global_config_file
        global_data = load_config_file(global_file) if global_file.is_file() else {}
        merged = {**global_data, **local_data}
        merged["notebook_path"] = notebook_root
        return self._build(merged, source)

    def _resolve_global(self, global_data: Dict[str, Any], declared: Path) -> NotebookConfig:
        notebook_root = Path(os.path.abspath(os.path.expanduser(declared)))
        local_file = local_config_file(notebook_root)
        local_data = load_config_file(local_file) if local_file.is_file() else {}
        merged = {**global_data, **local_data}
        merged["notebook_path"] = notebook_root
        return self._build(merged, ConfigSource.GLOBAL)

    def _build(self, data: Dict[str, Any], source: ConfigSource) -> NotebookConfig:
        data["source"] = source
        try:
            config = NotebookConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigParseError(f"Invalid configuration: {e}") from e
        logger.debug(f"Resolved config from {source.value}: {config.notebook_path}")
        return config

    @staticmethod
    def save_config(path: Path, data: Mapping[str, Any]) -> None:
        """Write a config mapping as YAML, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(dict(data), sort_keys=False, allow_unicode=True), encoding="utf-8"
        )


def load_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML config file into a dict.

    Raises:
        ConfigParseError: If the file is not valid YAML or not a mapping
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigParseError(f"Config file must contain a mapping: {path}")
    return data
