"""Command line interface for zk-next."""
