"""Search and suggestion commands."""

from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from directory_index.cli.app import app
from directory_index.cli.commands.command_utils import console, run_command
from directory_index.container import ServiceContainer
from directory_index.schemas import SearchQuery


@app.command()
def search(
    q: Annotated[str, typer.Argument(help="Free text; every term must match")],
    category: Annotated[Optional[str], typer.Option(help="Category id to narrow to")] = None,
    subcategory: Annotated[Optional[str], typer.Option(help="Subcategory id to narrow to")] = None,
    limit: Annotated[Optional[int], typer.Option(min=1, max=100)] = None,
    offset: Annotated[int, typer.Option(min=0)] = 0,
    sort_by: Annotated[
        str, typer.Option("--sort-by", help="relevance, name, rating or createdAt")
    ] = "relevance",
):
    """Search businesses and print ranked results."""
    try:
        query = SearchQuery(
            q=q,
            category=category,
            subcategory=subcategory,
            limit=limit,
            offset=offset,
            sort_by=sort_by,
        )
    except ValidationError as e:
        console.print(f"[red]Invalid search:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(1)

    async def _search(services: ServiceContainer):
        return await services.search.search(query)

    result = run_command(_search)

    table = Table(title=f"Results for '{q}' ({result.total} total, page {result.page})")
    table.add_column("Name", style="cyan")
    table.add_column("Rating", justify="right")
    table.add_column("Featured")
    table.add_column("Id", style="dim")
    for business in result.data:
        table.add_row(
            business.name,
            f"{business.rating:.1f}",
            "yes" if business.featured else "",
            business.id,
        )
    console.print(table)

    if result.categories:
        names = ", ".join(f"{c.name} ({c.count})" for c in result.categories)
        console.print(f"Categories: {names}")
    if result.stale_ids:
        console.print(
            f"[yellow]{len(result.stale_ids)} stale index references skipped; "
            "run [green]directory-index reconcile[/green][/yellow]"
        )


@app.command()
def suggest(q: Annotated[str, typer.Argument(help="Partial query")]):
    """Print autocomplete suggestions, best first."""

    async def _suggest(services: ServiceContainer):
        return await services.search.suggest(q)

    for term in run_command(_suggest):
        console.print(term)
