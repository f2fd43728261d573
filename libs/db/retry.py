"""Retry policy for transient database failures.

Runs an async unit of work and retries it with exponential backoff and
jitter when the failure looks transient (dropped connection, operational
error). Everything else propagates on the first attempt.

The unit of work must own its transaction: retrying re-runs the whole
operation, so the caller passes ``before_retry`` (usually
``session.rollback``) to reset the session between attempts.

Usage:
    policy = DatabaseRetryPolicy.from_settings()
    await policy.execute(
        do_work,
        operation_name="activation.complete_training_module",
        before_retry=session.rollback,
    )
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from sqlalchemy.exc import DBAPIError, OperationalError

from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    """Connection drops and operational errors are worth another attempt."""
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return False


@dataclass
class DatabaseRetryConfig:
    max_attempts: int = 3
    base_delay_ms: int = 50
    max_delay_ms: int = 1000
    jitter_ms: int = 25


class DatabaseRetryPolicy:
    """Execute async database operations with retry semantics."""

    def __init__(
        self,
        config: Optional[DatabaseRetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.config = config or DatabaseRetryConfig()
        self._sleep = sleep

    @classmethod
    def from_settings(cls) -> DatabaseRetryPolicy:
        settings = get_settings()
        return cls(
            DatabaseRetryConfig(
                max_attempts=max(1, settings.DB_RETRY_MAX_ATTEMPTS),
                base_delay_ms=settings.DB_RETRY_BASE_DELAY_MS,
                max_delay_ms=settings.DB_RETRY_MAX_DELAY_MS,
            )
        )

    def backoff_ms(self, attempt: int) -> float:
        """min(base * 2^(attempt-1), max) + random(0, jitter)"""
        delay = min(
            self.config.base_delay_ms * (2 ** (attempt - 1)), self.config.max_delay_ms
        )
        return delay + random.uniform(0, self.config.jitter_ms)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        operation_name: str,
        before_retry: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> T:
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as exc:
                if not is_transient(exc) or attempt >= self.config.max_attempts:
                    if attempt > 1:
                        logger.error(
                            "%s gave up after %d attempts: %s",
                            operation_name,
                            attempt,
                            exc,
                        )
                    raise

                delay_ms = self.backoff_ms(attempt)
                logger.warning(
                    "%s failed on attempt %d/%d, retrying in %.0fms: %s",
                    operation_name,
                    attempt,
                    self.config.max_attempts,
                    delay_ms,
                    exc,
                )
                if before_retry is not None:
                    await before_retry()
                await self._sleep(delay_ms / 1000)
                attempt += 1
