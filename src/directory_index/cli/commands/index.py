"""Index statistics and repair commands."""

from typing import Annotated

import typer
from rich.table import Table

from directory_index.cli.app import app
from directory_index.cli.commands.command_utils import console, run_command
from directory_index.container import ServiceContainer
from directory_index.services import load_businesses


@app.command()
def stats():
    """Show business and category counts with the most recently indexed businesses."""

    async def _stats(services: ServiceContainer):
        counts = await services.businesses.stats()
        recent = await load_businesses(
            services.entity_store, await services.businesses.recent_ids(limit=5)
        )
        return counts, recent.businesses

    counts, recent = run_command(_stats)

    table = Table(title="Directory index")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    table.add_row("Businesses", str(counts.total_businesses))
    table.add_row("Active", str(counts.active_businesses))
    table.add_row("Featured", str(counts.featured_businesses))
    table.add_row("Categories", str(counts.categories_count))
    console.print(table)

    if recent:
        console.print("Recently indexed:")
        for business in recent:
            console.print(f"  [cyan]{business.name}[/cyan] [dim]{business.id}[/dim]")


@app.command()
def reconcile(
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Report drift without writing changes")
    ] = False,
):
    """Remove dangling index entries and restore missing ones from the business records."""

    async def _reconcile(services: ServiceContainer):
        return await services.reconcile.reconcile(dry_run=dry_run)

    report = run_command(_reconcile)

    console.print(f"Scanned {report.businesses} businesses")
    if not report.total:
        console.print("[green]Indexes are consistent[/green]")
        return

    for key, ids in sorted(report.removed.items()):
        console.print(f"  [red]-[/red] {key}: {len(ids)}")
    for key, ids in sorted(report.added.items()):
        console.print(f"  [green]+[/green] {key}: {len(ids)}")
    if report.recency_removed or report.recency_added:
        console.print(
            f"  recency: -{len(report.recency_removed)} +{len(report.recency_added)}"
        )

    verb = "Would apply" if dry_run else "Applied"
    console.print(f"{verb} {report.total} changes ({len(report.stale_ids)} stale ids)")
