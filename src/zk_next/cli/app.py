from typing import Optional

import typer

from zk_next.config import ZkSettings
from zk_next.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import zk_next

        typer.echo(f"zk-next version: {zk_next.__version__}")
        raise typer.Exit()


# Top level options offered by `zkn --completion`
COMMON_OPTIONS = ("--help", "--version")


def completion_callback(value: bool) -> None:
    """Print the common options on one line and exit."""
    if value:
        typer.echo(" ".join(COMMON_OPTIONS))
        raise typer.Exit()


app = typer.Typer(
    name="zkn",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    completion: Optional[bool] = typer.Option(
        None,
        "--completion",
        help="Print completion candidates and exit",
        callback=completion_callback,
        is_eager=True,
        hidden=True,
    ),
) -> None:
    """zk-next - template driven notes with a searchable index."""
    settings = ZkSettings()
    setup_logging(
        debug=settings.debug, log_level=settings.log_level, log_file=settings.log_file
    )
    ctx.obj = settings


def get_settings(ctx: typer.Context) -> ZkSettings:
    """Settings stored by the app callback, or fresh ones read from the environment."""
    if isinstance(ctx.obj, ZkSettings):
        return ctx.obj
    return ZkSettings()
