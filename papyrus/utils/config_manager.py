"""Configuration manager for persistent settings stored as JSON."""

import json
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import (
    ConfigurationError,
    FileSystemError,
    InvalidConfigError,
    MissingConfigError,
    PapyrusError,
)
from .logging import get_logger, log_call
from .paths import CONFIG_PATH, DATABASE_PATH

logger = get_logger(__name__)


class RetryConfig(BaseModel):
    """Pydantic model for backend retry settings."""

    max_attempts: int = Field(default=3, ge=1)
    initial_delay: float = Field(default=1.0, ge=0)  # in seconds


class NavigationConfig(BaseModel):
    """Pydantic model for letter navigation and gesture settings."""

    swipe_threshold: float = 50.0
    narrow_swipe_threshold: float = 30.0
    narrow_breakpoint: int = 768
    wheel_threshold: float = 50.0
    wheel_reset_after: float = 0.2  # in seconds
    wheel_step: float = 20.0  # delta reported per terminal scroll tick
    enable_gestures: bool = True


class LoggingConfig(BaseModel):
    """Pydantic model for logging settings."""

    log_level: str = "INFO"
    console_level: str = "WARNING"


class StorageConfig(BaseModel):
    """Pydantic model for the letter store location."""

    database_path: str = str(DATABASE_PATH)


class AccountConfig(BaseModel):
    """Pydantic model for the signed-in account."""

    user_id: Optional[str] = None
    email: Optional[str] = None


class AppConfig(BaseModel):
    """Pydantic model for overall application configuration."""

    version: str = "0.1.0"
    retry: RetryConfig = Field(default_factory=RetryConfig)
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    account: AccountConfig = Field(default_factory=AccountConfig)


class ConfigManager:
    """Manages persistent application configuration."""

    _instance = None
    _initialized = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None):
        if not ConfigManager._initialized:
            self.path = Path(config_path) if config_path else CONFIG_PATH
            self.config = self._load_or_create_config()
            logger.info(f"Configuration loaded from {self.path}")
            ConfigManager._initialized = True

    @classmethod
    def reset_instance(cls) -> None:
        """Forget the singleton (mainly for testing)."""
        cls._instance = None
        cls._initialized = False

    def _load_or_create_config(self) -> AppConfig:
        """Load configuration from file or create default if not present."""

        if not self.path.exists():
            logger.info("No config file found, creating default configuration.")
            config = AppConfig()
            self._save_config(config)
            return config

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return AppConfig(**data)

        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file: {e}")
            raise InvalidConfigError(
                f"Configuration file is not valid JSON: {str(e)}"
            ) from e
        except ValidationError as e:
            logger.error(f"Failed to validate config file: {e}")
            raise InvalidConfigError(
                f"Configuration data does not match expected schema: {str(e)}"
            ) from e
        except OSError as e:
            raise FileSystemError(f"Failed to read configuration file: {str(e)}") from e

    def _save_config(self, config: Optional[AppConfig] = None) -> None:
        """Save the current configuration to file."""

        config = config or self.config

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(config.model_dump(), f, indent=2, ensure_ascii=False)
            logger.debug("Configuration successfully saved.")
        except OSError as e:
            raise FileSystemError(f"Failed to write configuration file: {str(e)}") from e

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a configuration value using a dot-separated key path."""

        obj: Any = self.config
        for key in key_path.split("."):
            if not hasattr(obj, key):
                return default
            obj = getattr(obj, key)
        return obj

    @log_call
    def set(self, key_path: str, value: Any, persist: bool = True) -> None:
        """Set a configuration value using a dot-separated key path."""

        keys = key_path.split(".")
        obj: Any = self.config

        for key in keys[:-1]:
            if not hasattr(obj, key):
                raise MissingConfigError(
                    f"Configuration path '{key_path}' is invalid: '{key}' not found"
                )
            obj = getattr(obj, key)

        if not hasattr(obj, keys[-1]):
            raise MissingConfigError(
                f"Configuration key '{keys[-1]}' does not exist in path '{key_path}'"
            )

        try:
            # Validate through the owning section so bad types are rejected
            section = obj.model_validate({**obj.model_dump(), keys[-1]: value})
            setattr(obj, keys[-1], getattr(section, keys[-1]))
        except ValidationError as e:
            raise InvalidConfigError(
                f"Invalid value for '{key_path}': {str(e)}"
            ) from e

        if persist:
            self._save_config()

        logger.info(f"Config key '{key_path}' updated.")

    @log_call
    def reset(self) -> None:
        """Reset configuration to default values."""

        try:
            logger.warning("Resetting configuration to default values.")
            self.config = AppConfig()
            self._save_config()
        except PapyrusError:
            raise
        except Exception as e:
            raise ConfigurationError(
                f"Failed to reset configuration to defaults: {str(e)}"
            ) from e
