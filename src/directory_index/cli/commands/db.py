"""Database management commands."""

import typer
from loguru import logger

from directory_index import db
from directory_index.cli.app import db_app
from directory_index.cli.commands.command_utils import console, run_with_cleanup
from directory_index.config import ConfigManager


async def _reset(app_config) -> None:
    engine, _ = await db.get_or_create_db(app_config, ensure_tables=False)
    await db.drop_tables(engine)
    await db.create_tables(engine)


@db_app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Reset the entity store (drop all tables and recreate)."""
    app_config = ConfigManager().config
    target = app_config.database_url or app_config.database_path
    if not yes and not typer.confirm(f"Delete every business, category and index in {target}?"):
        raise typer.Abort()

    logger.info(f"Resetting database {target}")
    run_with_cleanup(_reset(app_config))
    console.print("[green]Database reset complete[/green]")
