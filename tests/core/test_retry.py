"""
Unit tests for the retry executor.
"""

import logging
from unittest.mock import MagicMock

import pytest

from ffmpegkit.core.exceptions import (
    InstallCancelledError,
    RetryExhaustedError,
    VersionNotAvailableError,
)
from ffmpegkit.core.retry import CancellationToken, RetryPolicy, with_retry


class FlakyOperation:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: int, result="ok", error=ConnectionError):
        self.failures = failures
        self.result = result
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error(f"failure {self.calls}")
        return self.result


class TestRetryPolicy:
    """Test RetryPolicy."""

    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 5
        assert policy.initial_delay_ms == 1000

    def test_delay_doubles_per_attempt(self):
        policy = RetryPolicy(initial_delay_ms=100)
        assert [policy.delay_ms(n) for n in (1, 2, 3)] == [200, 400, 800]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError, match="max_attempts"):
            RetryPolicy(max_attempts=0)

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError, match="initial_delay_ms"):
            RetryPolicy(initial_delay_ms=-1)

    def test_as_kwargs(self):
        assert RetryPolicy(3, 50).as_kwargs() == {
            "max_attempts": 3,
            "initial_delay_ms": 50,
        }


class TestWithRetry:
    """Test with_retry."""

    def test_success_first_try_does_not_sleep(self):
        sleep = MagicMock()
        assert with_retry(lambda: 42, sleep=sleep) == 42
        sleep.assert_not_called()

    @pytest.mark.parametrize("failures", [1, 2, 4])
    def test_k_failures_then_success(self, failures):
        """k failures then success makes k+1 attempts with doubling delays."""
        operation = FlakyOperation(failures)
        sleep = MagicMock()

        result = with_retry(operation, max_attempts=5, initial_delay_ms=10, sleep=sleep)

        assert result == "ok"
        assert operation.calls == failures + 1
        delays = [c.args[0] for c in sleep.call_args_list]
        assert delays == [10 * 2**n / 1000 for n in range(1, failures + 1)]

    def test_always_failing_raises_retry_exhausted(self):
        operation = FlakyOperation(failures=100)
        sleep = MagicMock()

        with pytest.raises(RetryExhaustedError) as exc_info:
            with_retry(operation, max_attempts=3, initial_delay_ms=1, sleep=sleep)

        assert operation.calls == 3
        assert sleep.call_count == 2
        assert exc_info.value.attempts == 3
        assert isinstance(exc_info.value.last_error, ConnectionError)
        assert exc_info.value.__cause__ is exc_info.value.last_error
        assert "Failed after 3 attempts" in str(exc_info.value)

    def test_single_attempt_never_sleeps(self):
        operation = FlakyOperation(failures=1)
        sleep = MagicMock()

        with pytest.raises(RetryExhaustedError):
            with_retry(operation, max_attempts=1, sleep=sleep)

        assert operation.calls == 1
        sleep.assert_not_called()

    def test_fatal_errors_are_not_retried(self):
        operation = FlakyOperation(failures=1, error=lambda msg: VersionNotAvailableError("^9"))
        sleep = MagicMock()

        with pytest.raises(VersionNotAvailableError):
            with_retry(operation, fatal=(VersionNotAvailableError,), sleep=sleep)

        assert operation.calls == 1
        sleep.assert_not_called()

    def test_non_fatal_domain_errors_are_retried(self):
        operation = FlakyOperation(failures=1, error=lambda msg: VersionNotAvailableError("^9"))

        assert with_retry(operation, initial_delay_ms=0, sleep=MagicMock()) == "ok"
        assert operation.calls == 2

    def test_retry_is_logged_at_debug(self, caplog):
        operation = FlakyOperation(failures=1)

        with caplog.at_level(logging.DEBUG, logger="ffmpegkit.core.retry"):
            with_retry(operation, initial_delay_ms=5, sleep=MagicMock())

        assert "attempt 1" in caplog.text
        assert "10ms" in caplog.text

    def test_invalid_max_attempts(self):
        with pytest.raises(ValueError):
            with_retry(lambda: 1, max_attempts=0)


class TestCancellation:
    """Test CancellationToken integration."""

    def test_cancelled_token_prevents_first_attempt(self):
        token = CancellationToken()
        token.cancel()
        operation = MagicMock()

        with pytest.raises(InstallCancelledError):
            with_retry(operation, cancellation=token)

        operation.assert_not_called()

    def test_cancel_during_operation_stops_retries(self):
        token = CancellationToken()

        def operation():
            token.cancel()
            raise ConnectionError("boom")

        with pytest.raises(InstallCancelledError):
            with_retry(operation, initial_delay_ms=1, cancellation=token)

    def test_cancellation_error_from_operation_is_not_retried(self):
        operation = MagicMock(side_effect=InstallCancelledError("stop"))

        with pytest.raises(InstallCancelledError):
            with_retry(operation, sleep=MagicMock())

        assert operation.call_count == 1

    def test_expired_deadline_counts_as_cancelled(self):
        token = CancellationToken(deadline=0)
        assert token.is_cancelled
        with pytest.raises(InstallCancelledError):
            token.raise_if_cancelled()

    def test_with_timeout_sets_future_deadline(self):
        token = CancellationToken.with_timeout(60)
        assert not token.is_cancelled
        assert token.deadline is not None

    def test_wait_uses_token_not_sleep(self):
        token = CancellationToken.with_timeout(60)
        operation = FlakyOperation(failures=1)
        sleep = MagicMock()

        assert with_retry(operation, initial_delay_ms=0, cancellation=token, sleep=sleep) == "ok"
        sleep.assert_not_called()
