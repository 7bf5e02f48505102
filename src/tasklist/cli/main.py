"""Main CLI entry point.

    tasklist serve              # Start the API on 127.0.0.1:8000
    tasklist user add ada       # Provision a login
"""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler

from tasklist.cli.serve_cmd import serve
from tasklist.cli.user_cmd import user
from tasklist.core.errors import TasklistError

console = Console(stderr=True)


def setup_logging(level: str = "INFO") -> None:
    """Route all logging through rich. Call once, before the first log line."""
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    root.setLevel(level.upper())

    # uvicorn's access log duplicates the request log middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.captureWarnings(True)


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Config file (default: ./tasklist.yaml, then ~/.config/tasklist/config.yaml)",
)
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def main(ctx: click.Context, config_path: str | None, log_level: str | None) -> None:
    """Tasklist - per-user task lists behind cookie sessions."""
    from tasklist.config import load_config

    config = load_config(config_path)
    setup_logging(log_level or config.log_level)
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


main.add_command(serve)
main.add_command(user)


def cli_entrypoint() -> None:
    """Wrapped entrypoint that prints TasklistError without a traceback.

    Called from pyproject.toml [project.scripts].
    """
    try:
        main(standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except click.Abort:
        console.print("\n[dim]Aborted[/dim]")
        sys.exit(130)
    except TasklistError as e:
        console.print(f"[red]Error [{e.error_id}]:[/red] {e.message}")
        sys.exit(1)
