"""Database access layer - public API."""

from .backend import SERVER_NOW, LetterBackend, SQLLetterBackend, translate_error
from .base import MEMORY, create_engine, database_url, dispose_engine, metadata
from .config import DatabaseConfig, get_config, reset_config
from .engine_manager import EngineManager
from .models import contacts, letters, user_profiles
from .query import LetterQueryBuilder

__all__ = [
    "SERVER_NOW",
    "LetterBackend",
    "SQLLetterBackend",
    "translate_error",
    "MEMORY",
    "create_engine",
    "database_url",
    "dispose_engine",
    "metadata",
    "DatabaseConfig",
    "get_config",
    "reset_config",
    "EngineManager",
    "contacts",
    "letters",
    "user_profiles",
    "LetterQueryBuilder",
]
