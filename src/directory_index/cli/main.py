"""Main CLI entry point for directory-index."""  # pragma: no cover

from directory_index.cli.app import app  # pragma: no cover

# Register commands
from directory_index.cli.commands import db, index, search  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
