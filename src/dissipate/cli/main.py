"""Dissipate CLI — operator commands for accounts and the server.

Usage:
    dissipate users list                          # All accounts
    dissipate users add me@example.com me         # Prompts for the password
    dissipate users remove me@example.com         # Deletes the user and their messages
    dissipate hash-password                       # Print an Argon2 credential for seeding
    dissipate serve                               # Run the API with uvicorn

There is no self-service signup: accounts are created here.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Awaitable, Callable, Optional, TypeVar

import click
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from dissipate import __version__
from dissipate.auth.password import hash_password
from dissipate.config import settings
from dissipate.db.engine import init_db
from dissipate.services.user_service import EmailTakenError, UserService

T = TypeVar("T")

MIN_PASSWORD_LENGTH = 8


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner) — run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


async def _with_users(database_url: str, fn: Callable[[UserService], Awaitable[T]]) -> T:
    """Open a short-lived engine + session, run `fn`, tear everything down."""
    engine = create_async_engine(database_url)
    try:
        await init_db(engine)
        session_factory = async_sessionmaker(engine, expire_on_commit=False)
        async with session_factory() as session:
            return await fn(UserService(session))
    finally:
        await engine.dispose()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _fail(message: str):
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


def _check_password(password: str):
    if len(password) < MIN_PASSWORD_LENGTH:
        _fail(f"password must be at least {MIN_PASSWORD_LENGTH} characters")


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="dissipate")
@click.option(
    "--database-url",
    envvar="DISSIPATE_DATABASE_URL",
    default=None,
    help="SQLAlchemy async URL (defaults to the configured database)",
)
@click.pass_context
def main(ctx: click.Context, database_url: Optional[str]):
    """Dissipate — personal journal backend."""
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url or settings.database_url


# ---------------------------------------------------------------------------
# dissipate users ...
# ---------------------------------------------------------------------------


@main.group()
def users():
    """Manage user accounts."""


@users.command("list")
@click.pass_context
def list_users(ctx: click.Context):
    """List all users."""
    accounts = _run(_with_users(ctx.obj["database_url"], lambda svc: svc.list_users()))
    if not accounts:
        click.echo("No users found.")
        return
    _print_table(
        [{"id": u.id, "email": u.email, "username": u.username} for u in accounts],
        [("ID", "id", 36), ("EMAIL", "email", 30), ("USERNAME", "username", 20)],
    )


@users.command("add")
@click.argument("email")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_context
def add_user(ctx: click.Context, email: str, username: str, password: str):
    """Create a user with an Argon2id-hashed password."""
    _check_password(password)
    try:
        user = _run(
            _with_users(
                ctx.obj["database_url"],
                lambda svc: svc.create_user(email=email, username=username, password=password),
            )
        )
    except EmailTakenError:
        _fail(f"a user with email {email} already exists")
    click.secho(f"User added: {user.email} ({user.id})", fg="green")


@users.command("remove")
@click.argument("email")
@click.pass_context
def remove_user(ctx: click.Context, email: str):
    """Delete a user and all of their messages."""
    removed = _run(_with_users(ctx.obj["database_url"], lambda svc: svc.delete_by_email(email)))
    if not removed:
        _fail(f"no user with email {email}")
    click.secho(f"User removed: {email}", fg="green")


# ---------------------------------------------------------------------------
# dissipate hash-password / serve
# ---------------------------------------------------------------------------


@main.command("hash-password")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def hash_password_cmd(password: str):
    """Print an Argon2id credential string (for seeding a database)."""
    click.echo(hash_password(password))


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "dissipate.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.debug,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
