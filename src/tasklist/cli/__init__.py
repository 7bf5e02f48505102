"""Tasklist CLI - Command-line interface."""

from tasklist.cli.main import cli_entrypoint, main

__all__ = ["cli_entrypoint", "main"]
