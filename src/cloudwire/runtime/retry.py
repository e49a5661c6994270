"""Retry policy: exponential backoff with jitter.

Retries on:
- transport failures (connect errors, timeouts)
- throttling responses
- server-side faults (5xx)

Everything else is raised on the first attempt.
"""

from __future__ import annotations

import logging
import random

from cloudwire.core.config import RetryConfig
from cloudwire.core.errors import CloudWireError, ServiceError, TransportError

from .errors import is_transient

logger = logging.getLogger(__name__)


class RetryPolicy:
    def __init__(self, config: RetryConfig | None = None) -> None:
        config = config or RetryConfig()
        self.max_attempts = config.max_attempts
        self.base_backoff = config.base_backoff
        self.max_backoff = config.max_backoff

    def should_retry(self, error: CloudWireError, attempt: int) -> bool:
        """Whether ``error`` raised on ``attempt`` (1-based) is retried."""
        if attempt >= self.max_attempts:
            return False
        if isinstance(error, TransportError):
            return True
        if isinstance(error, ServiceError):
            return is_transient(error)
        return False

    def backoff_delay(self, attempt: int) -> float:
        """Exponential backoff with jitter."""
        base = self.base_backoff * (2 ** (attempt - 1))
        return min(base + random.uniform(0, base * 0.5), self.max_backoff)

    def log_retry(self, operation_name: str, error: CloudWireError, attempt: int, wait: float) -> None:
        logger.warning(
            "%s failed (attempt %d/%d), retrying in %.2fs: %s",
            operation_name, attempt, self.max_attempts, wait, error,
        )
