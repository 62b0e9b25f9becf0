"""Tests for error classification and handling."""

import asyncio

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from papyrus.core.database import translate_error
from papyrus.utils.errors import (
    DatabaseError,
    ErrorCategory,
    ErrorHandler,
    ForbiddenError,
    LetterNotFoundError,
    NetworkError,
    NetworkTimeoutError,
    PapyrusError,
    TransientBackendError,
    ValidationError,
    classify_error,
    format_error_message,
    is_retryable,
    user_friendly_message,
)


class TestClassifyError:
    def test_papyrus_errors_pass_through(self):
        error = ForbiddenError("nope")

        assert classify_error(error) is error

    @pytest.mark.parametrize(
        "error,expected",
        [
            (asyncio.TimeoutError(), NetworkTimeoutError),
            (ConnectionResetError("reset"), NetworkError),
            (RuntimeError("Permission denied"), ForbiddenError),
            (RuntimeError("Invalid input syntax"), ValidationError),
            (RuntimeError("Row not found"), LetterNotFoundError),
            (RuntimeError("Failed to fetch"), NetworkError),
        ],
    )
    def test_raw_errors(self, error, expected):
        assert isinstance(classify_error(error), expected)

    def test_unknown_errors_keep_their_message(self):
        classified = classify_error(RuntimeError("Something odd"))

        assert type(classified) is PapyrusError
        assert classified.user_message == "Something odd"
        assert classified.retryable is True

    def test_retryability(self):
        assert is_retryable(TransientBackendError())
        assert is_retryable(NetworkTimeoutError())
        assert not is_retryable(ValidationError())
        assert not is_retryable(LetterNotFoundError())

    def test_user_friendly_message(self):
        assert user_friendly_message(asyncio.TimeoutError()) == NetworkTimeoutError.user_message


class TestTranslateError:
    def test_integrity_foreign_key(self):
        raw = IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))

        error = translate_error(raw, "insert contacts")

        assert isinstance(error, ValidationError)
        assert error.details["constraint"] == "foreign_key"

    def test_operational_errors_are_transient(self):
        raw = OperationalError("SELECT", {}, Exception("database is locked"))

        error = translate_error(raw, "select")

        assert isinstance(error, TransientBackendError)
        assert error.retryable

    def test_unexpected_errors_become_database_errors(self):
        assert isinstance(translate_error(KeyError("x"), "select"), DatabaseError)


class TestErrorHandler:
    def test_handle_returns_dict(self):
        result = ErrorHandler.handle(LetterNotFoundError("gone"), "test")

        assert result["category"] == ErrorCategory.NOT_FOUND.value
        assert result["message"] == "gone"

    def test_format_error_message(self):
        assert format_error_message(ForbiddenError("x")) == ForbiddenError.user_message
        assert "unexpected" in format_error_message(KeyError("x"))
