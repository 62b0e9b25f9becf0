"""Tests for the exponential-backoff retry policy."""

from unittest.mock import AsyncMock

import pytest

from papyrus.utils.errors import (
    AuthenticationError,
    ForbiddenError,
    LetterNotFoundError,
    TransientBackendError,
    ValidationError,
)
from papyrus.utils.retry import backoff_delay, retry_with_backoff


class TestBackoffDelay:
    def test_doubles_each_attempt(self):
        assert [backoff_delay(n, 1.0) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_scales_with_initial_delay(self):
        assert backoff_delay(2, 0.5) == 2.0


class TestRetryWithBackoff:
    @pytest.mark.asyncio
    async def test_first_success_does_not_sleep(self, fake_sleep):
        operation = AsyncMock(return_value="ok")

        result = await retry_with_backoff(operation, sleep=fake_sleep)

        assert result == "ok"
        assert operation.await_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, fake_sleep):
        operation = AsyncMock(
            side_effect=[TransientBackendError(), TransientBackendError(), "ok"]
        )

        result = await retry_with_backoff(operation, sleep=fake_sleep)

        assert result == "ok"
        assert operation.await_count == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_reraises_last_error(self, fake_sleep):
        last = TransientBackendError("third")
        operation = AsyncMock(
            side_effect=[TransientBackendError("first"), TransientBackendError("second"), last]
        )

        with pytest.raises(TransientBackendError) as exc_info:
            await retry_with_backoff(operation, max_attempts=3, sleep=fake_sleep)

        assert exc_info.value is last
        assert operation.await_count == 3
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ForbiddenError("forbidden"),
            AuthenticationError("auth"),
            ValidationError("invalid"),
            LetterNotFoundError("missing"),
        ],
    )
    async def test_non_retryable_errors_fail_fast(self, fake_sleep, error):
        operation = AsyncMock(side_effect=error)

        with pytest.raises(type(error)):
            await retry_with_backoff(operation, sleep=fake_sleep)

        assert operation.await_count == 1
        assert fake_sleep.delays == []

    @pytest.mark.asyncio
    async def test_unclassified_errors_are_classified_by_message(self, fake_sleep):
        operation = AsyncMock(side_effect=RuntimeError("permission denied for table"))

        with pytest.raises(RuntimeError):
            await retry_with_backoff(operation, sleep=fake_sleep)

        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_generic_errors_are_retried(self, fake_sleep):
        operation = AsyncMock(side_effect=[RuntimeError("boom"), "ok"])

        assert await retry_with_backoff(operation, sleep=fake_sleep) == "ok"
        assert fake_sleep.delays == [1.0]

    @pytest.mark.asyncio
    async def test_custom_attempts_and_delay(self, fake_sleep):
        operation = AsyncMock(side_effect=TransientBackendError())

        with pytest.raises(TransientBackendError):
            await retry_with_backoff(
                operation, max_attempts=4, initial_delay=0.25, sleep=fake_sleep
            )

        assert fake_sleep.delays == [0.25, 0.5, 1.0]

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            await retry_with_backoff(AsyncMock(), max_attempts=0)
