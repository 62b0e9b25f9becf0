"""Centralized error taxonomy and classification."""

import asyncio
from enum import Enum
from typing import Any, Dict, Optional

from papyrus.utils.logging import get_logger

_logger = None


def _get_logger():
    """Get logger with lazy initialisation."""
    global _logger
    if _logger is None:
        _logger = get_logger(__name__)
    return _logger


## Error Categories


class ErrorCategory(Enum):
    """Categories of errors for better handling."""

    DATABASE = "database"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    PERMISSION = "permission"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FILE_SYSTEM = "file_system"
    CONFIGURATION = "configuration"
    UNKNOWN = "unknown"


## Custom Exceptions


class PapyrusError(Exception):
    """Base exception for all Papyrus errors."""

    category = ErrorCategory.UNKNOWN
    user_message = "An unexpected error occurred. Please try again."
    retryable = True

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
    ):
        """Initialise PapyrusError with optional message and details."""
        if user_message is not None:
            self.user_message = user_message
        self.message = message or self.user_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error details to a dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "category": self.category.value,
            "message": self.message,
            "user_message": self.user_message,
            "retryable": self.retryable,
            "details": self.details,
        }


## Database Errors


class DatabaseError(PapyrusError):
    """Base exception for database-related errors."""

    category = ErrorCategory.DATABASE
    user_message = "A database error occurred"


class DatabaseConnectionError(DatabaseError):
    """Exception for database connection failures."""

    user_message = "Failed to connect to the database"


## Network Errors


class NetworkError(PapyrusError):
    """Base exception for network-related errors."""

    category = ErrorCategory.NETWORK
    user_message = "Network error. Please check your connection and try again."


class TransientBackendError(NetworkError):
    """Backend reported a failure that may succeed on retry."""

    user_message = "The server is temporarily unavailable. Please try again."


class NetworkTimeoutError(NetworkError):
    """Exception for network timeout errors."""

    user_message = "Request timed out. Please try again."


## Authentication and Permission Errors


class AuthenticationError(PapyrusError):
    """Base exception for authentication-related errors."""

    category = ErrorCategory.AUTHENTICATION
    user_message = "Authentication failed. Please log in again."
    retryable = False


class NotAuthenticatedError(AuthenticationError):
    """No identity is attached to the current session."""

    user_message = "You are not signed in. Please log in again."


class ForbiddenError(PapyrusError):
    """The backend refused the operation for the current identity."""

    category = ErrorCategory.PERMISSION
    user_message = "You do not have permission to perform this action."
    retryable = False


## Validation Errors


class ValidationError(PapyrusError):
    """Base exception for validation-related errors."""

    category = ErrorCategory.VALIDATION
    user_message = "Invalid input"
    retryable = False


## Not Found Errors


class LetterNotFoundError(PapyrusError):
    """Exception when a letter is absent from the backend."""

    category = ErrorCategory.NOT_FOUND
    user_message = "The requested letter was not found."
    retryable = False


## File System and Configuration Errors


class FileSystemError(PapyrusError):
    """Base exception for file system-related errors."""

    category = ErrorCategory.FILE_SYSTEM
    user_message = "A file system error occurred"
    retryable = False


class ConfigurationError(PapyrusError):
    """Base exception for configuration-related errors."""

    category = ErrorCategory.CONFIGURATION
    user_message = "A configuration error occurred"
    retryable = False


class MissingConfigError(ConfigurationError):
    """Exception for missing configuration settings."""

    user_message = "Missing configuration settings"


class InvalidConfigError(ConfigurationError):
    """Exception for invalid configuration settings."""

    user_message = "Invalid configuration settings"


## Classification

# Substring markers checked in order against lower-cased messages
_MESSAGE_MARKERS = (
    (("unauthorized", "not authenticated", "auth"), AuthenticationError),
    (("forbidden", "permission"), ForbiddenError),
    (("invalid",), ValidationError),
    (("not found",), LetterNotFoundError),
    (("timeout", "timed out"), NetworkTimeoutError),
    (("network", "fetch", "connection"), NetworkError),
)


def classify_error(error: BaseException) -> PapyrusError:
    """Map any exception onto the Papyrus taxonomy.

    Papyrus errors pass through untouched. Timeouts and OS-level connection
    failures become network errors, anything else is classified by the
    markers in its message, falling back to a retryable ``PapyrusError``.
    """
    if isinstance(error, PapyrusError):
        return error

    message = str(error) or error.__class__.__name__

    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return NetworkTimeoutError(message)

    if isinstance(error, (ConnectionError, OSError)):
        return NetworkError(message)

    lowered = message.lower()
    for markers, error_cls in _MESSAGE_MARKERS:
        if any(marker in lowered for marker in markers):
            return error_cls(message)

    return PapyrusError(message, user_message=message)


def is_retryable(error: BaseException) -> bool:
    """Check if an error is transient and worth another attempt."""
    return classify_error(error).retryable


def user_friendly_message(error: BaseException) -> str:
    """Get a user-presentable message for any exception."""
    return classify_error(error).user_message


## Error Handler


class ErrorHandler:
    """Centralized error handling and logging."""

    @staticmethod
    def handle(
        error: BaseException, context: str = "", log_traceback: bool = False
    ) -> Dict[str, Any]:
        """Log a classified error and return its dictionary form."""
        classified = classify_error(error)
        _get_logger().error(
            f"{context}: {classified.message}",
            extra={"category": classified.category.value, **classified.details},
        )
        if log_traceback:
            _get_logger().exception(error)

        return classified.to_dict()


def format_error_message(error: BaseException) -> str:
    """Format an error message for display."""
    if isinstance(error, PapyrusError):
        return error.user_message
    return "An unexpected error occurred - check logs for details."
