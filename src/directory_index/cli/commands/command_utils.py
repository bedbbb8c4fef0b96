"""utility functions for commands"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

import typer
from rich.console import Console

from directory_index import db
from directory_index.config import ConfigManager
from directory_index.container import ServiceContainer
from directory_index.services.exceptions import DirectoryIndexError

T = TypeVar("T")

console = Console()


@asynccontextmanager
async def open_services() -> AsyncIterator[ServiceContainer]:
    """Services bound to the configured database."""
    app_config = ConfigManager().config
    _, session_maker = await db.get_or_create_db(app_config)
    yield ServiceContainer.create(app_config, session_maker)


def run_with_cleanup(coro: Awaitable[T]) -> T:
    """Run a coroutine and dispose of database connections before the loop closes."""

    async def runner() -> T:
        try:
            return await coro
        finally:
            await db.shutdown_db()

    return asyncio.run(runner())


def run_command(fn: Callable[[ServiceContainer], Awaitable[T]]) -> T:
    """Run ``fn`` against fresh services, turning service errors into exit code 1."""

    async def with_services() -> T:
        async with open_services() as services:
            return await fn(services)

    try:
        return run_with_cleanup(with_services())
    except DirectoryIndexError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
