"""Engine manager wrapping SQLAlchemy connection pool."""

import asyncio
from pathlib import Path
from typing import Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from papyrus.core.database.base import MEMORY, create_engine, dispose_engine, metadata
from papyrus.core.database.config import DatabaseConfig, get_config
from papyrus.utils.errors import DatabaseConnectionError
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)


class EngineManager:
    """Manages SQLAlchemy async engine lifecycle."""

    def __init__(
        self,
        db_path: Union[Path, str],
        config: Optional[DatabaseConfig] = None,
    ) -> None:
        """Initialise engine manager.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
            config: Database configuration (uses singleton if None)
        """
        self.db_path = db_path if str(db_path) == MEMORY else Path(db_path)
        self.config = config or get_config()

        self._engine: Optional[AsyncEngine] = None
        self._lock = asyncio.Lock()

    async def get_engine(self) -> AsyncEngine:
        """Get or create the async engine.

        Returns:
            AsyncEngine instance with connection pooling

        Raises:
            DatabaseConnectionError: If engine creation fails
        """
        async with self._lock:
            if self._engine is None:
                try:
                    self._engine = create_engine(
                        self.db_path,
                        config=self.config,
                        echo=self.config.echo,
                    )
                    logger.info(f"Engine initialised: {self.db_path}")
                except Exception as e:
                    raise DatabaseConnectionError(
                        "Failed to create database engine",
                        details={"db_path": str(self.db_path), "error": str(e)},
                    ) from e

        return self._engine

    async def create_schema(self) -> None:
        """Create any missing tables."""
        engine = await self.get_engine()
        try:
            async with engine.begin() as conn:
                await conn.run_sync(metadata.create_all)
        except (SQLAlchemyError, OSError) as e:
            raise DatabaseConnectionError(
                "Failed to prepare database schema",
                details={"db_path": str(self.db_path), "error": str(e)},
            ) from e
        logger.debug("Schema ensured")

    async def close(self) -> None:
        """Dispose of engine and close all pooled connections."""
        if self._engine:
            try:
                await dispose_engine(self._engine)
                self._engine = None
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")

    async def __aenter__(self):
        """Context manager entry."""
        await self.get_engine()

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Context manager exit."""
        await self.close()
        return False
