"""Retry with exponential backoff for LLM requests.

Delays follow ``initial_delay_ms * backoff_factor ** retry``, capped at
``max_delay_ms``, without jitter.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import TypeVar

from analyzer_engine.config import RetryConfig
from analyzer_engine.errors import LlmError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: Exception) -> bool:
    return isinstance(exc, LlmError) and exc.retryable


def retry_with_backoff(
    fn: Callable[[], T],
    config: RetryConfig,
    should_retry: Callable[[Exception], bool] = is_retryable,
) -> T:
    """Call *fn* until it succeeds or the retry budget is spent.

    Parameters
    ----------
    fn:
        Zero-argument callable, invoked from scratch on every attempt.
    config:
        Retry budget and backoff parameters.
    should_retry:
        Predicate deciding whether a raised exception is transient.
        Anything it rejects propagates immediately.

    Returns
    -------
    T
        The first successful result of *fn*.

    Raises
    ------
    Exception
        The last exception raised by *fn*, once ``config.max_retries``
        retries have failed, or the first non-retryable one.
    """
    for attempt in range(config.max_retries + 1):
        try:
            return fn()
        except Exception as exc:
            if attempt >= config.max_retries or not should_retry(exc):
                raise
            delay = config.delay_seconds(attempt)
            logger.warning(
                "Retry %d/%d after %.1fs: %s",
                attempt + 1,
                config.max_retries,
                delay,
                exc,
            )
            time.sleep(delay)

    raise AssertionError("unreachable")  # pragma: no cover
