"""CLI commands for zk-next."""

from . import add, init, reindex, search

__all__ = ["add", "init", "reindex", "search"]
