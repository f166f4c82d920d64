"""Docman operator CLI — schema setup, role provisioning, serving.

Usage:
    docman init-db                         # Create tables
    docman create-role admin --access-level 2
    docman list-roles                      # Roles ordered by access level
    docman serve --port 8000               # Run the API with uvicorn

Roles are never created by the API; this is the out-of-band path.
Database location comes from DOCMAN_DATABASE_URL (or --database-url).
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from docman.config import settings
from docman.db.engine import Database
from docman.errors import DuplicateRoleError
from docman.services.role_service import RoleService


def _database(url: Optional[str]) -> Database:
    if url:
        return Database(url)
    return Database.from_settings(settings)


async def _init_db(database: Database) -> None:
    try:
        await database.create_all()
    finally:
        await database.dispose()


async def _create_role(database: Database, title: str, access_level: int):
    try:
        await database.create_all()
        async with database.session_factory() as session:
            return await RoleService(session).create_role(title, access_level)
    finally:
        await database.dispose()


async def _list_roles(database: Database):
    try:
        async with database.session_factory() as session:
            return await RoleService(session).list_roles()
    finally:
        await database.dispose()


@click.group()
@click.option(
    "--database-url",
    envvar="DOCMAN_DATABASE_URL",
    default=None,
    help="SQLAlchemy async URL (defaults to configured settings).",
)
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str]) -> None:
    """Docman — document management backend."""
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create every table that does not exist yet."""
    asyncio.run(_init_db(_database(ctx.obj["database_url"])))
    click.secho("Schema ready.", fg="green")


@cli.command("create-role")
@click.argument("title")
@click.option("--access-level", type=int, default=0, show_default=True)
@click.pass_context
def create_role(ctx: click.Context, title: str, access_level: int) -> None:
    """Provision a role."""
    try:
        role = asyncio.run(
            _create_role(_database(ctx.obj["database_url"]), title, access_level)
        )
    except DuplicateRoleError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created role {role.title} (level {role.access_level})", fg="green")


@cli.command("list-roles")
@click.pass_context
def list_roles(ctx: click.Context) -> None:
    """Show roles ordered by access level."""
    roles = asyncio.run(_list_roles(_database(ctx.obj["database_url"])))
    if not roles:
        click.echo("No roles.")
        return
    for role in roles:
        click.echo(f"{role.access_level:>3}  {role.title}")


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings).")
@click.option("--port", type=int, default=None, help="Port (default from settings).")
@click.option("--reload", is_flag=True, help="Reload on code changes.")
def serve(host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "docman.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
