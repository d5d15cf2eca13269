"""Search command: full text search over the notebook index."""

from typing import Optional

import typer
from sqlalchemy.exc import OperationalError

from zk_next.cli.app import app, get_settings
from zk_next.cli.commands.utils import console, fail, load_config, print_completion
from zk_next.indexer import Indexer


@app.command()
def search(
    ctx: typer.Context,
    query: Optional[str] = typer.Argument(None, help="Words to search for"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Maximum results"),
    raw: bool = typer.Option(False, "--raw", help="Pass QUERY to FTS5 unchanged"),
    completion: bool = typer.Option(
        False, "--completion", help="Print completion candidates and exit", hidden=True
    ),
):
    """Print the id and path of every note matching QUERY, best match first."""
    if completion:
        print_completion()
        return
    if not query:
        fail("Error: Missing argument 'QUERY'.")

    config = load_config(get_settings(ctx))
    with Indexer(config) as indexer:
        try:
            ids = indexer.search(query, limit=limit, raw=raw)
        except OperationalError as e:
            fail(f"Error: Invalid search query: {e.orig}")
        if not ids:
            console.print("[yellow]No matching notes[/yellow]")
            return
        for note_id in ids:
            record = indexer.get(note_id)
            typer.echo(f"{note_id} {record.path if record else ''}".rstrip())
