import asyncio
from contextlib import asynccontextmanager
from enum import Enum, auto
from pathlib import Path
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine,
    async_scoped_session,
)

from directory_index.config import DirectoryIndexConfig

# Module level state, one engine per database url
_engines: dict[str, AsyncEngine] = {}
_session_makers: dict[str, async_sessionmaker[AsyncSession]] = {}
_tables_created: dict[str, bool] = {}


class DatabaseType(Enum):
    """Types of supported databases."""

    MEMORY = auto()
    FILESYSTEM = auto()

    @classmethod
    def get_db_url(cls, db_path: Path, db_type: "DatabaseType") -> str:
        """Get SQLAlchemy URL for database path."""
        if db_type == cls.MEMORY:
            logger.info("Using in-memory SQLite database")
            return "sqlite+aiosqlite://"

        return f"sqlite+aiosqlite:///{db_path}"


def get_scoped_session_factory(
    session_maker: async_sessionmaker[AsyncSession],
) -> async_scoped_session:
    """Create a scoped session factory scoped to current task."""
    return async_scoped_session(session_maker, scopefunc=asyncio.current_task)


@asynccontextmanager
async def scoped_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Get a scoped session with proper lifecycle management.

    The session commits when the block exits cleanly and rolls back otherwise,
    so everything executed inside one block is a single transaction.

    Args:
        session_maker: Session maker to create scoped sessions from
    """
    factory = get_scoped_session_factory(session_maker)
    session = factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()
        await factory.remove()


# Execution option naming the BEGIN mode for a transaction: DEFERRED or IMMEDIATE.
SQLITE_BEGIN_OPTION = "sqlite_begin"


def _configure_sqlite(engine: AsyncEngine) -> None:
    """Set WAL pragmas and let SQLAlchemy emit BEGIN itself.

    The sqlite3 driver only opens a transaction at the first write, so reads
    at the start of a unit of work would run outside it. Disabling the
    driver's transaction handling and emitting BEGIN from the ``begin`` event
    makes every SQLAlchemy transaction start at its first statement.
    Connections opened with ``sqlite_begin="IMMEDIATE"`` take the write lock
    up front.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragmas(dbapi_connection, connection_record):  # pragma: no cover
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=10000")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):  # pragma: no cover
        mode = conn.get_execution_options().get(SQLITE_BEGIN_OPTION, "DEFERRED")
        conn.exec_driver_sql(f"BEGIN {mode}")


def _create_engine_and_session(
    db_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Internal helper to create engine and session maker."""
    logger.debug(f"Creating engine for db_url: {db_url}")
    connect_args = {"check_same_thread": False} if db_url.startswith("sqlite") else {}
    engine = create_async_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite") and db_url != "sqlite+aiosqlite://":
        _configure_sqlite(engine)
    session_maker = async_sessionmaker(engine, expire_on_commit=False)
    return engine, session_maker


def resolve_db_url(app_config: DirectoryIndexConfig) -> str:
    if app_config.database_url:
        return app_config.database_url
    app_config.home.mkdir(parents=True, exist_ok=True)
    return DatabaseType.get_db_url(app_config.database_path, DatabaseType.FILESYSTEM)


async def create_tables(engine: AsyncEngine) -> None:
    """Create the store tables if they do not exist yet."""
    from directory_index.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    from directory_index.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_or_create_db(
    app_config: DirectoryIndexConfig,
    ensure_tables: bool = True,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Get or create the engine and session maker for the configured database."""
    db_key = resolve_db_url(app_config)

    if db_key not in _engines:
        engine, session_maker = _create_engine_and_session(db_key)
        _engines[db_key] = engine
        _session_makers[db_key] = session_maker

    engine = _engines[db_key]
    session_maker = _session_makers[db_key]

    if ensure_tables and not _tables_created.get(db_key, False):
        await create_tables(engine)
        _tables_created[db_key] = True
        logger.info(f"Database tables ready for: {db_key}")

    return engine, session_maker


async def shutdown_db() -> None:
    """Clean up all database connections."""
    for db_key, engine in _engines.items():
        await engine.dispose()
        logger.debug(f"Disposed engine for: {db_key}")

    _engines.clear()
    _session_makers.clear()
    _tables_created.clear()


@asynccontextmanager
async def engine_session_factory(
    db_path: Path,
    db_type: DatabaseType = DatabaseType.MEMORY,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """Create engine and session factory with the store tables in place.

    Note: This is primarily used for testing where we want a fresh database
    for each test. For production use, use get_or_create_db() instead.
    """
    db_url = DatabaseType.get_db_url(db_path, db_type)
    engine, session_maker = _create_engine_and_session(db_url)
    try:
        await create_tables(engine)
        yield engine, session_maker
    finally:
        await engine.dispose()
