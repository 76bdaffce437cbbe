"""Resilience utilities — retry for store writes, error tracking."""

from __future__ import annotations

import logging
import random
import time
from functools import wraps
from threading import Lock
from typing import Any, Callable

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Retry with exponential backoff
# ---------------------------------------------------------------------------


def retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    backoff_factor: float = 2.0,
    jitter: bool = True,
    retryable_exceptions: tuple[type[Exception], ...] = (Exception,),
) -> Callable:
    """Decorator: retry a function with exponential backoff.

    Args:
        max_attempts: Total attempts (including first try).
        base_delay: Initial delay in seconds.
        max_delay: Maximum delay cap in seconds.
        backoff_factor: Multiplier applied to delay each retry.
        jitter: Add random jitter (±25%) to prevent thundering herd.
        retryable_exceptions: Exception types that trigger retry.
    """
    max_attempts = max(1, max_attempts)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = base_delay
            last_exception: Exception | None = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except retryable_exceptions as e:
                    last_exception = e
                    if attempt == max_attempts:
                        logger.error(
                            "%s failed after %d attempts: %s",
                            func.__name__, max_attempts, e,
                        )
                        raise

                    actual_delay = delay
                    if jitter:
                        actual_delay *= 0.75 + random.random() * 0.5

                    logger.warning(
                        "%s attempt %d/%d failed (%s), retrying in %.1fs",
                        func.__name__, attempt, max_attempts, e, actual_delay,
                    )
                    time.sleep(actual_delay)
                    delay = min(delay * backoff_factor, max_delay)

            raise last_exception  # type: ignore[misc]
        return wrapper
    return decorator


# ---------------------------------------------------------------------------
# Error Tracker: recent failures for the /api/errors page
# ---------------------------------------------------------------------------


class ErrorTracker:
    """In-memory ring buffer for recent errors. Queryable via API."""

    def __init__(self, max_entries: int = 500):
        self._entries: list[dict[str, Any]] = []
        self._max = max_entries
        self._lock = Lock()

    def record(
        self,
        source: str,
        error: Exception,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Record an error with source context."""
        entry = {
            "timestamp": time.time(),
            "source": source,
            "error_type": type(error).__name__,
            "message": str(error),
            "context": context or {},
        }
        with self._lock:
            self._entries.append(entry)
            if len(self._entries) > self._max:
                self._entries = self._entries[-self._max:]

    def get_errors(
        self,
        source: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        """Get recent errors, optionally filtered by source prefix."""
        with self._lock:
            entries = list(reversed(self._entries))
        if source:
            entries = [e for e in entries if e["source"].startswith(source)]
        return entries[:limit]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def count(self) -> int:
        return len(self._entries)


# Global error tracker instance
error_tracker = ErrorTracker()
