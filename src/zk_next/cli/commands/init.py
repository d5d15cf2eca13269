"""Init command: turn the working directory into a notebook."""

from pathlib import Path

import typer
from loguru import logger

from zk_next.cli.app import app
from zk_next.cli.commands.utils import print_completion
from zk_next.config import (
    ConfigManager,
    DEFAULT_TEMPLATE_SUFFIX,
    MARKER_DIR_NAME,
    TEMPLATES_DIR_NAME,
    default_notebook_config,
    local_config_file,
)
from zk_next.file_utils import ensure_directory, write_file_atomic

DEFAULT_TEMPLATE = """\
---
id: "{{ id }}"
type: {{ type }}
date: {{ date }}
title: {{ title | tojson }}
tags: {{ tags }}
aliases: [{{ aliases | tojson }}]
---

# {{ title }}
"""


def init_notebook(root: Path) -> bool:
    """Create the config and default template under root/.zk.

    Returns:
        False when the notebook was already initialized
    """
    config_file = local_config_file(root)
    ensure_directory(config_file.parent)
    if config_file.exists():
        logger.debug(f"Config already present: {config_file}")
        return False

    ConfigManager.save_config(config_file, default_notebook_config(root))
    template_file = (
        root / MARKER_DIR_NAME / TEMPLATES_DIR_NAME / f"default{DEFAULT_TEMPLATE_SUFFIX}"
    )
    if not template_file.exists():
        ensure_directory(template_file.parent)
        write_file_atomic(template_file, DEFAULT_TEMPLATE)
    return True


@app.command()
def init(
    completion: bool = typer.Option(
        False, "--completion", help="Print completion candidates and exit", hidden=True
    ),
):
    """Initialize a notebook in the current directory."""
    if completion:
        print_completion()
        return

    root = Path.cwd()
    if init_notebook(root):
        typer.echo(f"Initialized notebook in {root}")
        typer.echo(f"Created {MARKER_DIR_NAME}/{local_config_file(root).name}")
    else:
        typer.echo("Notebook already initialized")
