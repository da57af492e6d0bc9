"""Bounded retries for awaitable provider calls.

Only :class:`ProviderError` is retried, and only while its code is in
``RetryConfig.retryable_codes``; anything else escapes on the first raise.
The wait before attempt ``n + 1`` is ``delay_base ** n`` seconds, or a fixed
``delay_seconds`` when that is set.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, List, Optional, Protocol, Tuple, TypeVar

from ..errors import ErrorCode, ProviderError

T = TypeVar("T")


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: Optional[float],
        error: Optional[ProviderError],
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0
    retryable_codes: Tuple[ErrorCode, ...] = (
        ErrorCode.TRANSIENT,
        ErrorCode.RATE_LIMIT,
        ErrorCode.TIMEOUT,
    )
    attempt_logger: Optional[AttemptLogger] = None
    delay_seconds: Optional[float] = None

    def delays(self) -> Iterator[float]:
        """Waits between consecutive attempts (``max_attempts - 1`` values)."""
        for attempt in range(max(self.max_attempts - 1, 0)):
            yield self.delay_base**attempt if self.delay_seconds is None else self.delay_seconds


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_async(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
) -> T:
    """Await ``func()`` until it succeeds or the policy gives up.

    Every attempt, failed or not, is reported to ``config.attempt_logger``.
    The last error is re-raised unchanged.
    """
    waits: List[Optional[float]] = [*config.delays(), None]
    report = config.attempt_logger
    for attempt, wait in enumerate(waits):
        try:
            result = await func()
        except ProviderError as exc:
            if report:
                report(attempt=attempt, max_attempts=config.max_attempts, delay=wait, error=exc)
            if wait is None or exc.code not in config.retryable_codes:
                raise
            await asyncio.sleep(wait)
        else:
            if report:
                report(attempt=attempt, max_attempts=config.max_attempts, delay=None, error=None)
            return result
    raise AssertionError("unreachable: the final attempt either returns or raises")  # pragma: no cover


__all__ = ["RetryConfig", "DEFAULT_RETRY_CONFIG", "retry_async", "AttemptLogger"]
