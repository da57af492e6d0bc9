from __future__ import annotations

import pytest

from completion_providers.base.chunks import UsageChunk
from completion_providers.base.errors import ErrorCode, ProviderError
from completion_providers.base.logging import get_logger
from completion_providers.base.resilience import RetryConfig, retry_async
from completion_providers.base.usage_fetch import fetch_usage_with_retry


def _failing(codes, result="ok"):
    calls = []

    async def func():
        calls.append(1)
        if len(calls) <= len(codes):
            raise ProviderError(code=codes[len(calls) - 1], message="nope", provider="p")
        return result

    return func, calls


async def test_retries_retryable_codes_then_succeeds():
    func, calls = _failing([ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT])
    assert await retry_async(func, RetryConfig(max_attempts=3, delay_seconds=0)) == "ok"
    assert len(calls) == 3


async def test_non_retryable_raises_immediately():
    func, calls = _failing([ErrorCode.AUTH])
    with pytest.raises(ProviderError):
        await retry_async(func, RetryConfig(max_attempts=5, delay_seconds=0))
    assert len(calls) == 1


async def test_exhaustion_reraises_last_error_and_logs_attempts():
    attempts = []

    def attempt_logger(**kw):
        attempts.append(kw)

    func, calls = _failing([ErrorCode.TIMEOUT] * 5)
    config = RetryConfig(max_attempts=2, delay_seconds=0, attempt_logger=attempt_logger)
    with pytest.raises(ProviderError):
        await retry_async(func, config)
    assert len(calls) == 2
    assert [a["attempt"] for a in attempts] == [0, 1]
    assert attempts[-1]["delay"] is None


def test_exponential_delays():
    assert list(RetryConfig(max_attempts=4, delay_base=2.0).delays()) == [1.0, 2.0, 4.0]
    assert list(RetryConfig(max_attempts=3, delay_seconds=0.2).delays()) == [0.2, 0.2]


async def test_usage_fetch_retries_any_failure(log_events):
    calls = []

    async def lookup():
        calls.append(1)
        if len(calls) < 3:
            raise LookupError("not settled")
        return UsageChunk(input_tokens=5, output_tokens=6, total_cost=0.01)

    usage = await fetch_usage_with_retry(
        lookup, provider="p", model="m", logger=get_logger("providers.test"), delay_seconds=0
    )
    assert usage == UsageChunk(input_tokens=5, output_tokens=6, total_cost=0.01)
    assert len(log_events.named("usage.fetch_retry")) == 3
    assert not log_events.named("usage.fetch_omitted")


async def test_usage_fetch_gives_up_after_max_attempts(log_events):
    calls = []

    async def lookup():
        calls.append(1)
        raise RuntimeError("connection reset")

    usage = await fetch_usage_with_retry(
        lookup, provider="p", model="m", logger=get_logger("providers.test"), delay_seconds=0
    )
    assert usage is None
    assert len(calls) == 10
    (omitted,) = log_events.named("usage.fetch_omitted")
    assert omitted["attempts"] == 10
    assert "connection reset" in omitted["error"]
