"""Helpers shared by the commands."""

from pathlib import Path
from typing import Iterable, NoReturn, Optional

import typer
from loguru import logger
from rich.console import Console

from zk_next.config import ConfigManager, NotebookConfig, ZkSettings
from zk_next.exceptions import ZkError

console = Console()


def print_completion(candidates: Iterable[str] = ()) -> None:
    """Print completion candidates on a single line (an empty line when there are none)."""
    typer.echo(" ".join(candidates))


def fail(message: str) -> NoReturn:
    """Report a fatal error on stderr and exit with status 1."""
    typer.echo(message, err=True)
    raise typer.Exit(1)


def load_config(settings: ZkSettings, cwd: Optional[Path] = None) -> NotebookConfig:
    """Resolve the notebook config, exiting with status 1 when it cannot be loaded."""
    try:
        return ConfigManager(settings, cwd=cwd).load()
    except ZkError as e:
        logger.debug(f"Config loading failed: {e}")
        fail(f"Error: {e}")
