"""Add command: create a note from a template."""

from typing import Optional

import typer
from loguru import logger

from zk_next.cli.app import app, get_settings
from zk_next.cli.commands.utils import fail, load_config, print_completion
from zk_next.config import ConfigManager, list_template_types
from zk_next.exceptions import ZkError
from zk_next.services import NoteService
from zk_next.services.note_service import DEFAULT_TYPE
from zk_next.utils import parse_tags


def template_completions(ctx: typer.Context) -> list[str]:
    """Configured template types; ``note`` when no config can be loaded."""
    try:
        config = ConfigManager(get_settings(ctx)).load()
    except Exception as e:
        logger.debug(f"Completion falling back to default type: {e}")
        return [DEFAULT_TYPE]
    return list_template_types(config)


@app.command()
def add(
    ctx: typer.Context,
    type_name: str = typer.Argument(DEFAULT_TYPE, metavar="[TYPE]", help="Template type"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Note title"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma separated tags"),
    completion: bool = typer.Option(
        False, "--completion", help="Print completion candidates and exit", hidden=True
    ),
):
    """Create a new note from the template for TYPE."""
    if completion:
        print_completion(template_completions(ctx))
        return

    settings = get_settings(ctx)
    config = load_config(settings)
    try:
        path = NoteService(config, settings).create_note(
            type_name, title=title, tags=parse_tags(tags)
        )
    except ZkError as e:
        logger.debug(f"add failed: {e!r}")
        fail(str(e))

    typer.echo(f"Note created: {path}")
