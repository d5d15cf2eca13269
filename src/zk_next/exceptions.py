"""Exceptions raised by zk-next."""

from pathlib import Path
from typing import List, Sequence


class ZkError(Exception):
    """Base class for errors reported to the user."""

    pass


class ConfigError(ZkError):
    """Raised when configuration cannot be resolved or read."""

    pass


class ConfigNotFoundError(ConfigError):
    """Raised when no configuration file could be located."""

    def __init__(self, searched: Sequence[Path]):
        self.searched: List[Path] = list(searched)
        locations = "\n".join(f"  {path}" for path in self.searched)
        super().__init__(f"No configuration found. Searched locations:\n{locations}")


class ConfigParseError(ConfigError):
    """Raised when a configuration file is not valid YAML or has the wrong shape."""

    pass


class TemplateError(ZkError):
    """Base class for template problems."""

    pass


class TemplateNotFoundError(TemplateError):
    """Raised when no template definition matches the requested type."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"Template not found: {type_name}")


class TemplateFileNotFoundError(TemplateError):
    """Raised when a template body file is missing from every search location."""

    def __init__(self, filename: str, searched: Sequence[Path]):
        self.filename = filename
        self.searched: List[Path] = list(searched)
        locations = "\n".join(f"  {path}" for path in self.searched)
        super().__init__(f"Template file not found: {filename}\nSearched locations:\n{locations}")


class TemplateRenderError(TemplateError):
    """Raised when a template cannot be rendered."""

    pass


class FileError(ZkError):
    """Base exception for file operations."""

    pass


class FileWriteError(FileError):
    """Raised when writing a file fails."""

    pass


class ParseError(FileError):
    """Raised when parsing file content fails."""

    pass


class PathOutsideNotebookError(FileError):
    """Raised when a note would be written outside the notebook directory."""

    def __init__(self, path: Path, notebook_path: Path):
        self.path = path
        self.notebook_path = notebook_path
        super().__init__(f"Refusing to write outside the notebook {notebook_path}: {path}")


class MissingPathError(ZkError, ValueError):
    """Raised when a note is constructed without a path."""

    def __init__(self, message: str = "path is required"):
        super().__init__(message)
