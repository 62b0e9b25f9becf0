"""
Shared test fixtures and configuration for pytest
"""
import os
import tempfile

# Keep config, logs and databases out of the real home directory
os.environ["PAPYRUS_HOME"] = tempfile.mkdtemp(prefix="papyrus-test-")

from unittest.mock import AsyncMock, MagicMock

import pytest

from papyrus.core.database import EngineManager, LetterBackend, SQLLetterBackend, reset_config
from papyrus.core.session import Identity, Session
from papyrus.utils.config_manager import ConfigManager, RetryConfig


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def retry_config():
    return RetryConfig(max_attempts=3, initial_delay=1.0)


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def session(notifier):
    """Session for 'alice'"""
    return Session(Identity("alice", "alice@example.com"), notifier=notifier)


@pytest.fixture
def mock_backend():
    """LetterBackend double with async methods"""
    backend = MagicMock(spec=LetterBackend)
    backend.current_identity = AsyncMock(return_value=Identity("alice"))
    backend.select = AsyncMock(return_value=[])
    backend.update = AsyncMock(return_value=None)
    backend.insert = AsyncMock()
    backend.delete = AsyncMock(return_value=0)
    return backend


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "letters.db"


@pytest.fixture
async def engine_manager(db_path):
    """EngineManager over a fresh temporary SQLite database"""
    manager = EngineManager(db_path)
    await manager.create_schema()
    yield manager
    await manager.close()


@pytest.fixture
def sql_backend(engine_manager, session):
    return SQLLetterBackend(engine_manager, session)


@pytest.fixture
def backend_for(engine_manager):
    """Build a SQL backend acting as another user."""

    def build(user_id):
        return SQLLetterBackend(engine_manager, Session(Identity(user_id)))

    return build


@pytest.fixture
def config_manager(tmp_path):
    """ConfigManager persisted to a temporary file"""
    ConfigManager.reset_instance()
    manager = ConfigManager(config_path=tmp_path / "config.json")
    yield manager
    ConfigManager.reset_instance()


@pytest.fixture(autouse=True)
def clear_env_vars():
    """Clear database environment variables before each test"""
    env_vars = ["DB_POOL_SIZE", "DB_POOL_TIMEOUT", "DB_QUERY_TIMEOUT", "DB_ECHO"]
    original = {}
    for var in env_vars:
        original[var] = os.environ.get(var)
        if var in os.environ:
            del os.environ[var]

    reset_config()
    yield

    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]
