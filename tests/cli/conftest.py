"""Fixtures for CLI tests.

CLI commands run their own event loop, so these fixtures stay synchronous.
"""

import pytest
from typer.testing import CliRunner

from directory_index.cli.commands.command_utils import open_services, run_with_cleanup
from directory_index.schemas import BusinessCreate


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def seed(config_manager):
    """Create businesses in the configured database before invoking a command."""

    def _seed(*names: str, **fields):
        async def _create():
            async with open_services() as services:
                return await services.businesses.bulk_create(
                    [
                        BusinessCreate(name=name, category_id="c1", subcategory_id="s1", **fields)
                        for name in names
                    ]
                )

        return run_with_cleanup(_create())

    return _seed
