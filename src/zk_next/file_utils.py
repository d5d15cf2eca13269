"""Utilities for note files: front matter, markdown normalization and writes."""

from pathlib import Path
from typing import Any, Dict, List, Set, Tuple

import yaml
from loguru import logger
from markdown_it import MarkdownIt

from zk_next.exceptions import FileWriteError, ParseError

FRONTMATTER_DELIMITER = "---"

# Block tokens whose source lines must be kept byte for byte
VERBATIM_BLOCKS = ("fence", "code_block", "html_block")

md = MarkdownIt("commonmark")


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Parse YAML frontmatter from content.

    The body is returned exactly as it appears after the closing delimiter,
    including its leading newline.

    Args:
        content: Text content with optional frontmatter

    Returns:
        Tuple of (frontmatter dict, remaining content)

    Raises:
        ParseError: If the frontmatter block is not a valid YAML mapping
    """
    if not content.startswith(FRONTMATTER_DELIMITER):
        return {}, content

    # Split on first two occurrences of ---
    parts = content.split(FRONTMATTER_DELIMITER, 2)
    if len(parts) < 3:
        logger.debug("Opening frontmatter delimiter without a closing one, treating as body")
        return {}, content

    try:
        frontmatter = yaml.safe_load(parts[1])
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML in frontmatter: {e}") from e

    if frontmatter is None:
        return {}, parts[2]
    if not isinstance(frontmatter, dict):
        raise ParseError("Frontmatter must be a YAML dictionary")

    return frontmatter, parts[2]


def dump_frontmatter(metadata: Dict[str, Any], body: str) -> str:
    """
    Serialize metadata as a frontmatter block followed by body.

    Args:
        metadata: Key-value pairs for frontmatter, written in insertion order
        body: Markdown body appended after the closing delimiter

    Returns:
        Content with YAML frontmatter prepended

    Raises:
        ParseError: If YAML serialization fails
    """
    try:
        yaml_fm = yaml.safe_dump(
            metadata, sort_keys=False, allow_unicode=True, default_flow_style=False
        )
    except yaml.YAMLError as e:
        logger.error(f"Failed to serialize frontmatter: {e}")
        raise ParseError(f"Failed to serialize frontmatter: {e}") from e
    return f"{FRONTMATTER_DELIMITER}\n{yaml_fm}{FRONTMATTER_DELIMITER}\n{body}"


def reformat_markdown(text: str) -> str:
    """Normalize a markdown body to a canonical layout.

    Leading and trailing blank lines are dropped, runs of blank lines collapse
    to one, trailing whitespace is stripped (hard line breaks are kept) and the
    result ends with a single newline. Code blocks and raw HTML are untouched.
    """
    try:
        tokens = md.parse(text)
    except Exception as e:
        raise ParseError(f"Failed to parse markdown: {e}") from e

    verbatim: Set[int] = set()
    for token in tokens:
        if token.type in VERBATIM_BLOCKS and token.map:
            verbatim.update(range(*token.map))

    lines: List[str] = []
    for number, line in enumerate(text.splitlines()):
        if number in verbatim:
            lines.append(line)
        elif not line.strip():
            if lines and lines[-1] != "":
                lines.append("")
        elif line.endswith("  "):
            lines.append(line.rstrip() + "  ")
        else:
            lines.append(line.rstrip())

    while lines and lines[-1] == "":
        lines.pop()
    return "\n".join(lines) + "\n" if lines else ""


def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating if necessary.

    Raises:
        FileWriteError: If directory creation fails
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Failed to create directory: {path}: {e}")
        raise FileWriteError(f"Failed to create directory {path}: {e}") from e


def write_file_atomic(path: Path, content: str) -> None:
    """
    Write file with atomic operation using temporary file.

    Raises:
        FileWriteError: If write operation fails
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        temp_path.write_text(content, encoding="utf-8")
        temp_path.replace(path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        logger.error(f"Failed to write file: {path}: {e}")
        raise FileWriteError(f"Failed to write file {path}: {e}") from e
