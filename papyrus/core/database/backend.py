"""Backend query interface and its SQLAlchemy implementation."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import Select, Table, delete, insert, update
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.sql import ColumnElement

from papyrus.core.database.engine_manager import EngineManager
from papyrus.core.session import Identity, Session
from papyrus.core.validation import Timestamps
from papyrus.utils.errors import (
    DatabaseError,
    NetworkError,
    PapyrusError,
    TransientBackendError,
    ValidationError,
)
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)

Row = Mapping[str, Any]


class _ServerNow:
    """Patch value replaced by the backend's own clock."""

    def __repr__(self) -> str:
        return "SERVER_NOW"


SERVER_NOW = _ServerNow()


class LetterBackend(ABC):
    """Generic relational query interface consumed by the feed services.

    Implementations raise errors from the Papyrus taxonomy only.
    """

    @abstractmethod
    async def current_identity(self) -> Optional[Identity]:
        """Return the authenticated identity, or None."""
        pass

    @abstractmethod
    async def select(self, query: Select) -> List[Row]:
        """Execute a read and return its rows as mappings."""
        pass

    @abstractmethod
    async def update(
        self, table: Table, predicate: ColumnElement[bool], patch: Dict[str, Any]
    ) -> Optional[Row]:
        """Apply ``patch`` to matching rows.

        Returns:
            The first affected row, or None when nothing matched
        """
        pass

    @abstractmethod
    async def insert(self, table: Table, values: Dict[str, Any]) -> Row:
        """Insert one row and return it."""
        pass

    @abstractmethod
    async def delete(self, table: Table, predicate: ColumnElement[bool]) -> int:
        """Delete matching rows and return how many were removed."""
        pass


def translate_error(error: Exception, operation: str) -> PapyrusError:
    """Convert a SQLAlchemy or OS error into the Papyrus taxonomy."""
    if isinstance(error, PapyrusError):
        return error

    details = {"operation": operation, "error": str(error)}

    if isinstance(error, IntegrityError):
        text = str(error.orig).lower() if error.orig else str(error).lower()
        if "foreign key" in text:
            details["constraint"] = "foreign_key"
        elif "unique" in text:
            details["constraint"] = "unique"
        return ValidationError(f"Integrity constraint failed during {operation}", details)

    if isinstance(
        error, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)
    ):
        return TransientBackendError(f"Backend unavailable during {operation}", details)

    if isinstance(error, (DBAPIError, SQLAlchemyError)):
        return DatabaseError(f"Database error during {operation}", details)

    if isinstance(error, OSError):
        return NetworkError(f"I/O failure during {operation}", details)

    return DatabaseError(f"Unexpected failure during {operation}", details)


class SQLLetterBackend(LetterBackend):
    """LetterBackend over an async SQLAlchemy engine.

    Identity comes from the session the backend was created for.
    """

    def __init__(self, engine_manager: EngineManager, session: Session):
        """Initialise backend.

        Args:
            engine_manager: Engine manager for database access
            session: Session providing the authenticated identity
        """
        self.engine_mgr = engine_manager
        self.session = session

    async def current_identity(self) -> Optional[Identity]:
        return self.session.identity

    @staticmethod
    def _resolve_patch(patch: Dict[str, Any]) -> Dict[str, Any]:
        now = Timestamps.to_iso(Timestamps.now())
        return {key: now if value is SERVER_NOW else value for key, value in patch.items()}

    async def select(self, query: Select) -> List[Row]:
        try:
            engine = await self.engine_mgr.get_engine()
            async with engine.connect() as conn:
                result = await conn.execute(query)
                return [dict(row) for row in result.mappings().all()]
        except Exception as e:
            raise translate_error(e, "select") from e

    async def update(
        self, table: Table, predicate: ColumnElement[bool], patch: Dict[str, Any]
    ) -> Optional[Row]:
        statement = (
            update(table)
            .where(predicate)
            .values(**self._resolve_patch(patch))
            .returning(*table.c)
        )
        try:
            engine = await self.engine_mgr.get_engine()
            async with engine.begin() as conn:
                result = await conn.execute(statement)
                rows = result.mappings().all()
        except Exception as e:
            raise translate_error(e, f"update {table.name}") from e

        logger.debug(f"Updated {len(rows)} row(s) in {table.name}")
        return dict(rows[0]) if rows else None

    async def insert(self, table: Table, values: Dict[str, Any]) -> Row:
        statement = insert(table).values(**self._resolve_patch(values)).returning(*table.c)
        try:
            engine = await self.engine_mgr.get_engine()
            async with engine.begin() as conn:
                result = await conn.execute(statement)
                row = result.mappings().one()
        except Exception as e:
            raise translate_error(e, f"insert {table.name}") from e

        logger.debug(f"Inserted row into {table.name}")
        return dict(row)

    async def delete(self, table: Table, predicate: ColumnElement[bool]) -> int:
        try:
            engine = await self.engine_mgr.get_engine()
            async with engine.begin() as conn:
                result = await conn.execute(delete(table).where(predicate))
        except Exception as e:
            raise translate_error(e, f"delete {table.name}") from e

        logger.debug(f"Deleted {result.rowcount} row(s) from {table.name}")
        return result.rowcount
