# pylint: disable=import-outside-toplevel
from __future__ import annotations

import asyncio
import importlib
from pathlib import Path
from typing import Annotated

import httpx
import typer
import uvicorn
from sqlmodel import SQLModel

from commons.db.session import create_engine_from_options, open_async_session
from world_cities.config import get_settings
from world_cities.db.config import MODEL_PATHS

cli = typer.Typer()
db_cli = typer.Typer()
cli.add_typer(db_cli, name="db")


def _load_models() -> None:
    for model_path in MODEL_PATHS:
        importlib.import_module(model_path)


async def _sync_tables(drop: bool) -> None:
    settings = get_settings()
    _load_models()
    engine = create_engine_from_options(settings.DATABASE_URL, {})
    try:
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(SQLModel.metadata.drop_all)
            else:
                await conn.run_sync(SQLModel.metadata.create_all)
    finally:
        await engine.dispose()


@db_cli.command("create-tables")
def create_tables():
    """Create the database tables that do not exist yet"""
    typer.secho("Creating tables", fg=typer.colors.GREEN)
    asyncio.run(_sync_tables(drop=False))


@db_cli.command("drop-tables")
def drop_tables(yes: Annotated[bool, typer.Option("--yes", help="Skip the confirmation prompt")] = False):
    """Drop every table of the service"""
    if not yes:
        typer.confirm("This deletes every city and country. Continue?", abort=True)
    typer.secho("Dropping tables", fg=typer.colors.YELLOW)
    asyncio.run(_sync_tables(drop=True))


@db_cli.command("load-data")
def load_data(path: Annotated[Path, typer.Argument(help="worldcities-style CSV file", exists=True, dir_okay=False)]):
    """Load countries and cities from a CSV file"""
    from world_cities.scripts.load_data import load_world_cities, read_world_cities

    frame = read_world_cities(path)
    typer.secho(f"Read {len(frame)} cities from {path}", fg=typer.colors.GREEN)

    async def _load() -> tuple[int, int]:
        async with open_async_session(get_settings(), app_name="world_cities_loader") as session:
            return await load_world_cities(session, frame)

    countries, cities = asyncio.run(_load())
    typer.secho(f"Created {countries} countries and {cities} cities", fg=typer.colors.GREEN)


@cli.command("run-local-server")
def run_server(
    port: int = 8000,
    host: str = "localhost",
    log_level: str = "debug",
    reload: bool = True,
):
    """Run the API development server(uvicorn)."""
    uvicorn.run(
        "world_cities.main:app",
        host=host,
        port=port,
        log_level=log_level,
        reload=reload,
    )


@cli.command()
def info():
    """Show project health and settings."""
    settings = get_settings()

    with httpx.Client(base_url=str(settings.SERVER_HOST)) as client:
        try:
            resp = client.get("/v1/health", follow_redirects=True)
        except httpx.ConnectError:
            app_health = typer.style("❌ API is not responding", fg=typer.colors.RED, bold=True)
        else:
            app_health = "\n".join([f"{key.upper()}={value}" for key, value in resp.json().items()])

    envs = "\n".join([f"{key}={value}" for key, value in settings.model_dump().items()])
    title = typer.style("===> APP INFO <==============\n", fg=typer.colors.BLUE)
    typer.secho(title + app_health + "\n" + envs)


if __name__ == "__main__":
    cli()
