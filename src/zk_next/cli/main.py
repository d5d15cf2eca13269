"""Main CLI entry point for zk-next."""

from zk_next.cli.app import app

# Register commands
from zk_next.cli.commands import add, init, reindex, search

__all__ = ["app", "add", "init", "reindex", "search"]

if __name__ == "__main__":  # pragma: no cover
    app()
