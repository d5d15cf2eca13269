"""Service for rebuilding the notebook index from the files on disk."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from zk_next.config import MARKER_DIR_NAME, NotebookConfig
from zk_next.indexer import Indexer
from zk_next.note import Note


@dataclass
class ReindexReport:
    """Outcome of a reindex run.

    Attributes:
        found: Markdown files discovered in the notebook
        indexed: Files added to or updated in the index
        failures: Files that could not be indexed, with the error message
    """

    found: int = 0
    indexed: int = 0
    failures: Dict[Path, str] = field(default_factory=dict)

    @property
    def skipped(self) -> int:
        return len(self.failures)


class ReindexService:
    """Indexes every markdown file of a notebook, one file at a time."""

    def __init__(self, config: NotebookConfig):
        self.config = config

    def find_markdown_files(self) -> List[Path]:
        """All ``.md`` files below the notebook root, outside the ``.zk`` directory."""
        root = self.config.notebook_path
        files = []
        for path in sorted(root.rglob("*.md")):
            if not path.is_file():
                continue
            if MARKER_DIR_NAME in path.relative_to(root).parts:
                continue
            files.append(path)
        return files

    def reindex(self, files: Optional[List[Path]] = None) -> ReindexReport:
        """Index files (default: every markdown file), isolating per-file failures."""
        files = self.find_markdown_files() if files is None else files
        report = ReindexReport(found=len(files))

        with Indexer(self.config) as indexer:
            for path in files:
                try:
                    indexer.index_note(Note(path=path))
                    report.indexed += 1
                except Exception as e:
                    report.failures[path] = str(e)
                    logger.warning(f"Failed to index {path}: {e}")
                    logger.opt(exception=e).debug(f"Error details for {path}")

        logger.debug(f"Indexed {report.indexed} of {report.found} files")
        return report
