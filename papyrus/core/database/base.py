"""Async SQLite engine construction for the letter store."""

from pathlib import Path
from typing import Optional, Union

from sqlalchemy import MetaData, event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from papyrus.core.database.config import DatabaseConfig, get_config
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

MEMORY = ":memory:"

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def database_url(db_path: Union[Path, str]) -> str:
    """SQLAlchemy URL for a letter store file, or ``:memory:``."""
    if str(db_path) == MEMORY:
        return "sqlite+aiosqlite://"
    return f"sqlite+aiosqlite:///{db_path}"


def _enforce_integrity(dbapi_conn, connection_record):
    # Contacts reference user_profiles; SQLite only checks that when asked
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _enable_wal(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_engine(
    db_path: Union[Path, str],
    config: Optional[DatabaseConfig] = None,
    echo: bool = False,
) -> AsyncEngine:
    """Create the async engine for a letter store.

    A file store gets a pooled engine in WAL mode. ``:memory:`` gets a
    single shared connection so every session sees the same tables.

    Args:
        db_path: Path to the SQLite file, or ``:memory:``
        config: Pool and timeout settings (uses singleton if None)
        echo: Log emitted SQL

    Returns:
        Configured async engine
    """
    config = config or get_config()
    in_memory = str(db_path) == MEMORY
    connect_args = {"timeout": config.query_timeout, "check_same_thread": False}

    if in_memory:
        engine = create_async_engine(
            database_url(db_path),
            echo=echo,
            poolclass=StaticPool,
            connect_args=connect_args,
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_async_engine(
            database_url(db_path),
            echo=echo,
            poolclass=AsyncAdaptedQueuePool,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        event.listen(engine.sync_engine, "connect", _enable_wal)

    event.listen(engine.sync_engine, "connect", _enforce_integrity)

    logger.info(f"Letter store engine created: {db_path}")
    return engine


async def dispose_engine(engine: AsyncEngine) -> None:
    """Dispose of engine and close all connections."""
    await engine.dispose()
    logger.info("Letter store engine disposed")
