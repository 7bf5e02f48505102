"""HTTP server command.

Usage:
    tasklist serve                      # Start on 127.0.0.1:8000
    tasklist serve --port 3000          # Custom port
    tasklist serve --env production     # Secure cookies on
"""

import click
from rich.console import Console

console = Console()


@click.command()
@click.option("--port", type=int, default=None, help="Port to listen on (default from config: 8000)")
@click.option("--host", default=None, help="Host to bind to (127.0.0.1 for local only)")
@click.option("--env", default=None, help="Application environment (default: development)")
@click.pass_context
def serve(ctx: click.Context, port: int | None, host: str | None, env: str | None) -> None:
    """Start the Tasklist HTTP server.

    Opens the task and user stores once, serves until interrupted, then
    closes them.

    \b
    Examples:
        tasklist serve
        tasklist serve --port 3000
        tasklist --config prod.yaml serve --env production
    """
    import uvicorn

    from tasklist.auth.users import UserStore
    from tasklist.server import create_app
    from tasklist.storage.tasks import TaskStore

    config = ctx.obj["config"]
    if port is not None:
        config.server.port = port
    if host is not None:
        config.server.host = host
    if env is not None:
        config.server.env = env

    tasks = TaskStore.open(config.storage.tasks_db)
    users = UserStore.open(config.storage.users_db)
    try:
        app = create_app(config, tasks=tasks, users=users)

        url = f"http://{config.server.host}:{config.server.port}{config.server.api_prefix}"
        console.print()
        console.print("[bold green]Tasklist[/bold green]")
        console.print(f"   URL: {url}")
        console.print(f"   Environment: {config.server.env}")
        if not config.secure_cookies:
            console.print("   Cookies: [yellow]insecure[/yellow] (sent over plain HTTP)")
        console.print()
        console.print("[dim]Press Ctrl+C to stop[/dim]")
        console.print()

        uvicorn.run(
            app,
            host=config.server.host,
            port=config.server.port,
            log_level=config.log_level.lower(),
            log_config=None,
        )
    finally:
        tasks.close()
        users.close()
