"""Tables backing the key-value entity store.

Each table models one Redis-style data type. Keys are namespaced strings owned by
the services layer; the tables know nothing about businesses or categories.
"""

from sqlalchemy import Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from directory_index.models.base import Base


class HashField(Base):
    """One field of a hash key, e.g. ``business:<id>`` / ``data``."""

    __tablename__ = "store_hash"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    field: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str] = mapped_column(Text)

    def __repr__(self) -> str:  # pragma: no cover
        return f"HashField(key={self.key!r}, field={self.field!r})"


class SetMember(Base):
    """Membership of a value in a set key, e.g. ``index:category:<id>``."""

    __tablename__ = "store_set"
    __table_args__ = (Index("ix_store_set_member", "member"),)

    key: Mapped[str] = mapped_column(String, primary_key=True)
    member: Mapped[str] = mapped_column(String, primary_key=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"SetMember(key={self.key!r}, member={self.member!r})"


class ScoredMember(Base):
    """Member of a sorted set together with its score."""

    __tablename__ = "store_zset"
    __table_args__ = (Index("ix_store_zset_key_score", "key", "score"),)

    key: Mapped[str] = mapped_column(String, primary_key=True)
    member: Mapped[str] = mapped_column(String, primary_key=True)
    score: Mapped[float] = mapped_column(Float)

    def __repr__(self) -> str:  # pragma: no cover
        return f"ScoredMember(key={self.key!r}, member={self.member!r}, score={self.score})"
