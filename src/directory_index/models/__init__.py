"""Models package for directory-index."""

from directory_index.models.base import Base
from directory_index.models.store import HashField, ScoredMember, SetMember

__all__ = [
    "Base",
    "HashField",
    "ScoredMember",
    "SetMember",
]
