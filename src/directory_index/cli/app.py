from typing import Optional

import typer

from directory_index.config import ConfigManager, init_cli_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        import directory_index

        config = ConfigManager().config
        typer.echo(f"directory-index version: {directory_index.__version__}")
        typer.echo(f"Database: {config.database_url or config.database_path}")
        raise typer.Exit()


app = typer.Typer(name="directory-index", no_args_is_help=True)


@app.callback()
def app_callback(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Directory Index - business listings with secondary indexes and ranked search."""
    if not version and ctx.invoked_subcommand is not None:
        init_cli_logging(ConfigManager().config)


# Register sub-command groups
db_app = typer.Typer(help="Manage the entity store database")
app.add_typer(db_app, name="db")
