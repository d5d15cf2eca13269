"""Utility functions for zk-next."""

import json
import re
import secrets
import sys
import unicodedata
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger

DEFAULT_ID_LENGTH = 8
DEFAULT_DATE_FORMAT = "%Y-%m-%d"


def setup_logging(
    debug: bool = False,
    log_level: str = "WARNING",
    log_file: Optional[Path] = None,
) -> None:
    """Configure loguru sinks for the CLI.

    Args:
        debug: Send DEBUG records to stderr regardless of log_level
        log_level: Minimum level for the stderr sink
        log_file: Optional file that receives every record from DEBUG up
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else log_level.upper(),
        format="<level>[{level}]</level> {message}",
        backtrace=debug,
        diagnose=debug,
    )
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level="DEBUG",
            rotation="10 MB",
            retention="10 days",
            encoding="utf-8",
        )


def generate_id(length: int = DEFAULT_ID_LENGTH) -> str:
    """Random lowercase hex identifier of the given length."""
    return secrets.token_hex((length + 1) // 2)[:length]


def slugify(text: Optional[Any], replacement: str = "-") -> str:
    """
    Normalize text into a filesystem and URL safe token:
    - Strip accents and drop characters outside ASCII
    - Convert to lowercase
    - Replace runs of anything but letters, digits, '_' and '-' with replacement
    - Collapse repeated replacement characters
    - Trim leading/trailing replacement characters
    """
    if text is None:
        return ""
    slug = unicodedata.normalize("NFKD", str(text))
    slug = slug.encode("ascii", "ignore").decode("ascii").lower()
    slug = re.sub(r"[^a-z0-9_-]+", replacement, slug)
    if replacement:
        slug = re.sub(f"(?:{re.escape(replacement)})+", replacement, slug)
        slug = slug.strip(replacement)
    return slug.strip("-")


def current_time_vars(
    date_format: str = DEFAULT_DATE_FORMAT,
    now: Optional[datetime] = None,
) -> Dict[str, str]:
    """Variables available to every template and filename pattern."""
    now = now or datetime.now()
    return {
        "date": now.strftime(date_format),
        "year": now.strftime("%Y"),
        "month": now.strftime("%m"),
        "id": generate_id(),
    }


def interpolate_pattern(pattern: str, variables: Mapping[str, Any]) -> str:
    """Replace ``{name}`` placeholders with values; unknown placeholders are left as is."""
    result = pattern
    for key, value in variables.items():
        result = result.replace(f"{{{key}}}", "" if value is None else str(value))
    return result


def parse_tags(tags: Union[str, Iterable[Any], None]) -> List[str]:
    """Parse a comma separated string or a sequence into a clean list of tags."""
    if tags is None:
        return []
    if isinstance(tags, str):
        return [t.strip() for t in tags.split(",") if t.strip()]
    return [str(t).strip() for t in tags if str(t).strip()]


def format_tags(tags: Iterable[str]) -> str:
    """Render tags as an inline YAML sequence such as ``["a", "b"]``."""
    return json.dumps(list(tags), ensure_ascii=False)


def find_template_file(
    notebook_path: Path,
    template_filename: str,
    global_templates_dir: Path,
) -> Optional[Path]:
    """Locate a template body, preferring the notebook over the user config.

    Only the top level of each templates directory is searched.
    """
    for candidate in template_search_paths(notebook_path, template_filename, global_templates_dir):
        logger.debug(f"Looking for template file: {candidate}")
        if candidate.is_file():
            logger.debug(f"Template file found: {candidate}")
            return candidate
    logger.debug(f"Template file not found: {template_filename}")
    return None


def template_search_paths(
    notebook_path: Path, template_filename: str, global_templates_dir: Path
) -> List[Path]:
    """Locations checked for a template file, in order."""
    return [
        Path(notebook_path) / ".zk" / "templates" / template_filename,
        Path(global_templates_dir) / template_filename,
    ]
