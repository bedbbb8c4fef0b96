"""Typed errors for entity store transport and timeout failures."""


class DirectoryIndexError(Exception):
    """Base exception for every directory-index error."""

    pass


class StoreUnavailableError(DirectoryIndexError):
    """Raised when the entity store cannot be reached or an operation times out.

    The core never retries; callers may retry the whole operation.
    """

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Entity store unavailable during {operation}: {reason}")
