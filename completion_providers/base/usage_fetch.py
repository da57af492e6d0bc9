"""Bounded out-of-band usage retrieval.

Some gateways (OpenRouter, Glama) report token usage and cost only through a
separate HTTP lookup that becomes consistent a short while after the stream
ends. :func:`fetch_usage_with_retry` polls such a lookup with a fixed delay
and gives up after a bounded number of attempts; the caller then omits the
usage chunk rather than failing a request whose text was already delivered.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from ..config.defaults import USAGE_FETCH_DELAY_SECONDS, USAGE_FETCH_MAX_ATTEMPTS
from .chunks import UsageChunk
from .errors import ErrorCode, ProviderError, classify_exception
from .logging import LogContext, log_event, normalized_log_event
from .resilience.retry import RetryConfig, retry_async

UsageLookup = Callable[[], Awaitable[UsageChunk]]


def _attempt_logger(logger: logging.Logger, ctx: LogContext):
    def _log(*, attempt: int, max_attempts: int, delay: Optional[float], error: Optional[ProviderError]) -> None:
        normalized_log_event(
            logger,
            "usage.fetch_retry",
            ctx,
            phase="usage",
            attempt=attempt + 1,
            error_code=error.code.value if error else None,
            max_attempts=max_attempts,
            delay=delay,
        )

    return _log


async def fetch_usage_with_retry(
    lookup: UsageLookup,
    *,
    provider: str,
    model: Optional[str],
    logger: logging.Logger,
    max_attempts: int = USAGE_FETCH_MAX_ATTEMPTS,
    delay_seconds: float = USAGE_FETCH_DELAY_SECONDS,
    initial_delay: float = 0.0,
) -> Optional[UsageChunk]:
    """Return the usage from ``lookup`` or ``None`` once every attempt failed.

    Any exception raised by ``lookup`` counts as a failed attempt; the lookup
    raises when the record is not ready yet.
    """
    ctx = LogContext(provider=provider, model=model)

    async def _attempt() -> UsageChunk:
        try:
            return await lookup()
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderError(
                code=classify_exception(exc),
                message=f"usage lookup failed: {exc}",
                provider=provider,
                model=model,
                raw=exc,
            ) from exc

    config = RetryConfig(
        max_attempts=max_attempts,
        delay_seconds=delay_seconds,
        retryable_codes=tuple(ErrorCode),
        attempt_logger=_attempt_logger(logger, ctx),
    )
    if initial_delay:
        await asyncio.sleep(initial_delay)
    try:
        return await retry_async(_attempt, config)
    except ProviderError as exc:
        log_event(
            logger,
            "usage.fetch_omitted",
            ctx,
            level=logging.WARNING,
            attempts=max_attempts,
            error=exc.message,
        )
        return None


__all__ = ["fetch_usage_with_retry", "UsageLookup"]
