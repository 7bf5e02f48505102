"""User provisioning commands.

Credentials are created here, out of band; the HTTP API never writes them.

Usage:
    tasklist user add ada          # Prompts for the password
    tasklist user list
    tasklist user remove ada
"""

import asyncio

import click
from rich.console import Console
from rich.table import Table

from tasklist.auth.users import UserStore
from tasklist.core.errors import ErrorCode, TasklistError

console = Console()


def _open_users(ctx: click.Context) -> UserStore:
    return UserStore.open(ctx.obj["config"].storage.users_db)


@click.group()
def user() -> None:
    """Manage login credentials."""


@user.command("add")
@click.argument("username")
@click.password_option("--password", help="Password (prompted when omitted)")
@click.pass_context
def add(ctx: click.Context, username: str, password: str) -> None:
    """Create a login for USERNAME."""
    users = _open_users(ctx)
    try:
        asyncio.run(users.add(username, password))
    except TasklistError as e:
        if e.code == ErrorCode.STORE_DUPLICATE:
            raise click.ClickException(f"user '{username}' already exists") from e
        raise
    finally:
        users.close()
    console.print(f"[green]✓[/green] Added user [bold]{username}[/bold]")


@user.command("list")
@click.pass_context
def list_users(ctx: click.Context) -> None:
    """List provisioned usernames."""
    users = _open_users(ctx)
    try:
        names = asyncio.run(users.usernames())
    finally:
        users.close()

    if not names:
        console.print("[dim]No users provisioned[/dim]")
        return

    table = Table(title="Users")
    table.add_column("Username")
    for name in names:
        table.add_row(name)
    console.print(table)


@user.command("remove")
@click.argument("username")
@click.pass_context
def remove(ctx: click.Context, username: str) -> None:
    """Delete the login for USERNAME."""
    users = _open_users(ctx)
    try:
        removed = asyncio.run(users.remove(username))
    finally:
        users.close()

    if not removed:
        raise click.ClickException(f"no such user '{username}'")
    console.print(f"[green]✓[/green] Removed user [bold]{username}[/bold]")
