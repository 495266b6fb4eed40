"""
Bounded exponential-backoff retry for network-dependent operations.

Usage:
    from ffmpegkit.core.retry import with_retry, RetryPolicy

    release = with_retry(provider.get_latest_release)

    policy = RetryPolicy(max_attempts=3, initial_delay_ms=500)
    releases = with_retry(provider.get_available_releases, **policy.as_kwargs())

The delay before retry N is ``initial_delay_ms * 2 ** N`` (N starts at 1),
with no jitter and no cap. Attempts are strictly bounded by max_attempts.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple, Type, TypeVar

from ffmpegkit.core.exceptions import InstallCancelledError, RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_INITIAL_DELAY_MS = 1000


@dataclass(frozen=True)
class RetryPolicy:
    """Retry parameters for the wrapped call sites of an install."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_ms < 0:
            raise ValueError("initial_delay_ms cannot be negative")

    def delay_ms(self, attempt: int) -> int:
        """Backoff delay in milliseconds before retry number ``attempt``."""
        return self.initial_delay_ms * 2**attempt

    def as_kwargs(self) -> dict:
        return {
            "max_attempts": self.max_attempts,
            "initial_delay_ms": self.initial_delay_ms,
        }


class CancellationToken:
    """
    Cooperative cancellation for long install flows.

    A token is cancelled explicitly with cancel() or implicitly once its
    deadline passes. Backoff waits return early when the token is cancelled.

    Example:
        >>> token = CancellationToken.with_timeout(60)
        >>> with_retry(fetch, cancellation=token)
    """

    def __init__(self, deadline: Optional[float] = None):
        """
        Args:
            deadline: Absolute time.monotonic() value after which the token
                counts as cancelled, or None for no deadline
        """
        self._event = threading.Event()
        self.deadline = deadline

    @classmethod
    def with_timeout(cls, seconds: float) -> "CancellationToken":
        return cls(deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def raise_if_cancelled(self) -> None:
        if self.is_cancelled:
            raise InstallCancelledError("Install was cancelled")

    def wait(self, seconds: float) -> None:
        """
        Sleep for ``seconds`` unless cancelled first.

        Raises:
            InstallCancelledError: If the token is or becomes cancelled
        """
        self.raise_if_cancelled()
        timeout = seconds
        if self.deadline is not None:
            timeout = min(seconds, max(0.0, self.deadline - time.monotonic()))
        self._event.wait(timeout)
        self.raise_if_cancelled()


def with_retry(
    operation: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS,
    *,
    fatal: Tuple[Type[BaseException], ...] = (),
    cancellation: Optional[CancellationToken] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``operation`` with bounded exponential backoff.

    Any exception is retried, except types listed in ``fatal`` and
    InstallCancelledError, which propagate immediately.

    Args:
        operation: Zero-argument callable to run
        max_attempts: Maximum number of attempts (including the first)
        initial_delay_ms: Base delay; retry N waits initial_delay_ms * 2**N
        fatal: Exception types that must not be retried
        cancellation: Optional token checked before every attempt and wait
        sleep: Sleep function taking seconds, used when no token is given

    Returns:
        The operation's result

    Raises:
        RetryExhaustedError: After max_attempts consecutive failures
        InstallCancelledError: If the token is cancelled
    """
    policy = RetryPolicy(max_attempts=max_attempts, initial_delay_ms=initial_delay_ms)

    attempt = 0
    while True:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        try:
            return operation()
        except InstallCancelledError:
            raise
        except fatal:
            raise
        except Exception as e:
            attempt += 1
            if attempt >= policy.max_attempts:
                raise RetryExhaustedError(attempt, e) from e

            delay = policy.delay_ms(attempt)
            logger.debug(f"Retrying... attempt {attempt}. Retrying in {delay}ms ({e})")
            if cancellation is not None:
                cancellation.wait(delay / 1000)
            else:
                sleep(delay / 1000)


__all__ = [
    "RetryPolicy",
    "CancellationToken",
    "with_retry",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_INITIAL_DELAY_MS",
]
