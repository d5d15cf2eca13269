"""Reindex command: rebuild the index from the notebook's markdown files."""

import typer

from zk_next.cli.app import app, get_settings
from zk_next.cli.commands.utils import fail, load_config, print_completion
from zk_next.services import ReindexService


@app.command()
def reindex(
    ctx: typer.Context,
    completion: bool = typer.Option(
        False, "--completion", help="Print completion candidates and exit", hidden=True
    ),
):
    """Index every markdown file in the notebook.

    Files below .zk are ignored. Files that cannot be parsed are reported
    and skipped, the rest are still indexed.
    """
    if completion:
        print_completion()
        return

    config = load_config(get_settings(ctx))
    if not config.notebook_path.is_dir():
        fail(f"Error: Notebook path not found: {config.notebook_path}")

    service = ReindexService(config)
    files = service.find_markdown_files()
    typer.echo(f"Found {len(files)} markdown files")

    report = service.reindex(files)

    typer.echo(f"Indexed {report.indexed} files")
    if report.skipped:
        typer.echo(f"Skipped {report.skipped} files due to errors")
