"""Lifecycle management for a Papyrus CLI or reader run."""

from pathlib import Path
from typing import Optional

from papyrus.core.database import SERVER_NOW, EngineManager, SQLLetterBackend, user_profiles
from papyrus.core.session import Identity, Notifier, Session
from papyrus.utils.errors import PapyrusError
from papyrus.utils.logging import get_logger

logger = get_logger(__name__)


class Workspace:
    """Opens the letter store and a session for one signed-in user.

    Use as an async context manager; leaving it closes the session and
    disposes of the engine.
    """

    def __init__(
        self,
        db_path: Path,
        user_id: Optional[str] = None,
        email: Optional[str] = None,
        notifier: Optional[Notifier] = None,
    ):
        """Initialise workspace.

        Args:
            db_path: Path to the SQLite letter store
            user_id: Signed-in user, or None for an anonymous run
            email: Email of the signed-in user
            notifier: Receives user-facing notifications
        """
        self.engine_manager = EngineManager(db_path)
        identity = Identity(user_id, email) if user_id else None
        self.session = Session(identity, notifier)
        self.backend = SQLLetterBackend(self.engine_manager, self.session)

    async def record_login(self) -> None:
        """Stamp the signed-in user's last login, creating the profile if needed."""
        identity = self.session.identity
        if identity is None:
            return

        row = await self.backend.update(
            user_profiles,
            user_profiles.c.id == identity.id,
            {"last_login_at": SERVER_NOW, "updated_at": SERVER_NOW},
        )
        if row is None:
            await self.backend.insert(
                user_profiles,
                {
                    "id": identity.id,
                    "display_label": identity.email or identity.id,
                    "last_login_at": SERVER_NOW,
                },
            )
            logger.info(f"Created profile for {identity.id}")

    async def open(self) -> "Workspace":
        await self.engine_manager.create_schema()
        await self.record_login()
        return self

    async def close(self) -> None:
        self.session.close()
        await self.engine_manager.close()

    async def __aenter__(self) -> "Workspace":
        try:
            return await self.open()
        except PapyrusError:
            await self.engine_manager.close()
            raise

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False
