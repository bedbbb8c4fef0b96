"""SQLAlchemy-backed entity store implementation."""

import asyncio
import fnmatch
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional, TypeVar

from loguru import logger
from sqlalchemy import delete, func, literal, select, union
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from directory_index import db
from directory_index.models.store import HashField, ScoredMember, SetMember
from directory_index.repository.entity_store import EntityStore
from directory_index.repository.store_errors import StoreUnavailableError

T = TypeVar("T")

LIKE_ESCAPE = "\\"


def glob_to_like(pattern: str) -> str:
    """Translate a glob pattern into a LIKE pattern matching a superset of its keys.

    ``*`` becomes ``%`` and ``?`` becomes ``_``. A ``[...]`` class becomes ``_``;
    the exact glob is re-checked in Python afterwards.
    """
    out: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "*":
            out.append("%")
        elif ch == "?":
            out.append("_")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append("[")
            else:
                out.append("_")
                i = end
        elif ch in ("%", "_", LIKE_ESCAPE):
            out.append(LIKE_ESCAPE + ch)
        else:
            out.append(ch)
        i += 1
    return "".join(out)


class SQLAlchemyEntityStore(EntityStore):
    """Entity store kept in the ``store_hash``, ``store_set`` and ``store_zset`` tables.

    Every operation runs in its own task-scoped session unless the store is bound
    to a session by :meth:`atomic`, in which case all operations share that
    session's transaction.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        timeout: Optional[float] = None,
        session: Optional[AsyncSession] = None,
    ):
        """Initialize with session maker.

        Args:
            session_maker: SQLAlchemy session maker
            timeout: Seconds allowed per operation, None disables the limit
            session: Session to bind every operation to (set by atomic())
        """
        self.session_maker = session_maker
        self.timeout = timeout
        self._bound_session = session

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        if self._bound_session is not None:
            yield self._bound_session
        else:
            async with db.scoped_session(self.session_maker) as session:
                yield session

    async def _run(self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        try:
            async with asyncio.timeout(self.timeout):
                async with self._session() as session:
                    return await fn(session)
        except TimeoutError as exc:
            logger.error(f"Store operation {operation} timed out after {self.timeout}s")
            raise StoreUnavailableError(operation, f"timed out after {self.timeout}s") from exc
        except (OperationalError, InterfaceError) as exc:
            logger.error(f"Store operation {operation} failed: {exc}")
            raise StoreUnavailableError(operation, str(exc.orig or exc)) from exc

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator["SQLAlchemyEntityStore"]:
        if self._bound_session is not None:
            yield self
            return

        try:
            async with db.scoped_session(self.session_maker) as session:
                # Take the write lock before the first read so concurrent units serialize.
                await session.connection(
                    execution_options={db.SQLITE_BEGIN_OPTION: "IMMEDIATE"}
                )
                yield SQLAlchemyEntityStore(self.session_maker, timeout=self.timeout, session=session)
        except (OperationalError, InterfaceError) as exc:
            logger.error(f"Store transaction failed: {exc}")
            raise StoreUnavailableError("atomic", str(exc.orig or exc)) from exc

    # Hashes

    async def get_field(self, key: str, field: str) -> Optional[str]:
        async def op(session: AsyncSession) -> Optional[str]:
            result = await session.execute(
                select(HashField.value).where(HashField.key == key, HashField.field == field)
            )
            return result.scalar_one_or_none()

        return await self._run("get_field", op)

    async def set_field(self, key: str, field: str, value: str) -> None:
        async def op(session: AsyncSession) -> None:
            stmt = sqlite_insert(HashField).values(key=key, field=field, value=value)
            stmt = stmt.on_conflict_do_update(
                index_elements=["key", "field"],
                set_={"value": stmt.excluded.value},
            )
            await session.execute(stmt)

        await self._run("set_field", op)

    async def delete_field(self, key: str, field: str) -> bool:
        async def op(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(HashField).where(HashField.key == key, HashField.field == field)
            )
            return bool(result.rowcount)

        return await self._run("delete_field", op)

    # Sets

    async def add_to_set(self, key: str, *members: str) -> int:
        if not members:
            return 0

        async def op(session: AsyncSession) -> int:
            rows = [{"key": key, "member": member} for member in dict.fromkeys(members)]
            stmt = sqlite_insert(SetMember).values(rows).on_conflict_do_nothing()
            result = await session.execute(stmt)
            return max(result.rowcount or 0, 0)

        return await self._run("add_to_set", op)

    async def remove_from_set(self, key: str, *members: str) -> int:
        if not members:
            return 0

        async def op(session: AsyncSession) -> int:
            result = await session.execute(
                delete(SetMember).where(SetMember.key == key, SetMember.member.in_(members))
            )
            return result.rowcount or 0

        return await self._run("remove_from_set", op)

    async def members_of(self, key: str) -> list[str]:
        async def op(session: AsyncSession) -> list[str]:
            result = await session.execute(
                select(SetMember.member).where(SetMember.key == key).order_by(SetMember.member)
            )
            return list(result.scalars().all())

        return await self._run("members_of", op)

    async def intersect_sets(self, *keys: str) -> list[str]:
        distinct_keys = list(dict.fromkeys(keys))
        if not distinct_keys:
            return []

        async def op(session: AsyncSession) -> list[str]:
            result = await session.execute(
                select(SetMember.member)
                .where(SetMember.key.in_(distinct_keys))
                .group_by(SetMember.member)
                .having(func.count(SetMember.key) == len(distinct_keys))
                .order_by(SetMember.member)
            )
            return list(result.scalars().all())

        return await self._run("intersect_sets", op)

    async def set_size(self, key: str) -> int:
        async def op(session: AsyncSession) -> int:
            result = await session.execute(
                select(func.count()).select_from(SetMember).where(SetMember.key == key)
            )
            return result.scalar_one()

        return await self._run("set_size", op)

    # Sorted sets

    async def add_scored(self, key: str, score: float, member: str) -> None:
        async def op(session: AsyncSession) -> None:
            stmt = sqlite_insert(ScoredMember).values(key=key, member=member, score=score)
            stmt = stmt.on_conflict_do_update(
                index_elements=["key", "member"],
                set_={"score": stmt.excluded.score},
            )
            await session.execute(stmt)

        await self._run("add_scored", op)

    async def remove_scored(self, key: str, *members: str) -> int:
        if not members:
            return 0

        async def op(session: AsyncSession) -> int:
            result = await session.execute(
                delete(ScoredMember).where(
                    ScoredMember.key == key, ScoredMember.member.in_(members)
                )
            )
            return result.rowcount or 0

        return await self._run("remove_scored", op)

    async def scored_members(
        self, key: str, start: int = 0, stop: int = -1, descending: bool = True
    ) -> list[str]:
        async def op(session: AsyncSession) -> list[str]:
            order = ScoredMember.score.desc() if descending else ScoredMember.score.asc()
            result = await session.execute(
                select(ScoredMember.member)
                .where(ScoredMember.key == key)
                .order_by(order, ScoredMember.member)
            )
            members = list(result.scalars().all())
            # Inclusive stop, negative indexes count from the end
            end = len(members) + stop + 1 if stop < 0 else stop + 1
            return members[start:end]

        return await self._run("scored_members", op)

    # Keys

    def _key_union(self, condition_for):
        return union(
            select(HashField.key.label("key")).where(condition_for(HashField.key)),
            select(SetMember.key.label("key")).where(condition_for(SetMember.key)),
            select(ScoredMember.key.label("key")).where(condition_for(ScoredMember.key)),
        )

    async def keys_matching(self, pattern: str) -> list[str]:
        like = glob_to_like(pattern)

        async def op(session: AsyncSession) -> list[str]:
            result = await session.execute(
                self._key_union(lambda column: column.like(like, escape=LIKE_ESCAPE))
            )
            candidates = result.scalars().all()
            return sorted(key for key in candidates if fnmatch.fnmatchcase(key, pattern))

        return await self._run("keys_matching", op)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0

        async def op(session: AsyncSession) -> int:
            existing = await session.execute(self._key_union(lambda column: column.in_(keys)))
            count = len(existing.scalars().all())
            for model in (HashField, SetMember, ScoredMember):
                await session.execute(delete(model).where(model.key.in_(keys)))
            return count

        return await self._run("delete", op)

    async def ping(self) -> bool:
        async def op(session: AsyncSession) -> bool:
            result = await session.execute(select(literal(1)))
            return result.scalar_one() == 1

        return await self._run("ping", op)
