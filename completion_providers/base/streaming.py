"""Stream lifecycle helpers shared by every adapter.

``guard_stream`` wraps an adapter's raw chunk generator and owns the parts of
the lifecycle that must behave identically across backends:

* ``stream.start`` / ``stream.end`` / ``stream.error`` events with the
  normalized keys (``phase``, ``emitted``, ``tokens``...).
* Every escaping exception becomes a provider-tagged ``ProviderError``; no
  chunk follows it.
* The source generator is closed when the consumer stops early.
* With ``ensure_usage`` the stream always terminates on a usage chunk: when
  the backend's last frame is not usage, the last seen counters (or zeros)
  are repeated at the end.

``iter_frames`` drives a frame-to-chunks converter and drops frames that fail
to parse, logging ``stream.frame_skipped`` instead of failing the request.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, AsyncGenerator, AsyncIterable, Awaitable, Callable, Iterable, Optional, TypeVar

from .chunks import StreamChunk, UsageChunk
from .errors import wrap_completion_error
from .logging import LogContext, log_event, normalized_log_event

T = TypeVar("T")
FrameConverter = Callable[[Any], Iterable[StreamChunk]]

# Exceptions a converter raises on a frame with an unexpected shape.
_FRAME_ERRORS = (json.JSONDecodeError, ValueError, TypeError, KeyError, AttributeError)


def _usage_tokens(usage: Optional[UsageChunk]) -> Optional[dict]:
    if usage is None:
        return None
    return {
        "prompt": usage.input_tokens,
        "completion": usage.output_tokens,
        "cache_write": usage.cache_write_tokens,
        "cache_read": usage.cache_read_tokens,
    }


async def guard_stream(
    source: AsyncGenerator[StreamChunk, None],
    *,
    label: str,
    provider: str,
    model: Optional[str],
    logger: logging.Logger,
    ensure_usage: bool = True,
) -> AsyncGenerator[StreamChunk, None]:
    """Yield ``source``'s chunks under the shared error and logging policy.

    Parameters:
        source: Raw adapter generator producing canonical chunks.
        label: Human-facing provider label used in error messages.
        provider: Canonical provider slug.
        model: Resolved model id.
        logger: Adapter logger (child of ``providers``).
        ensure_usage: Close with a usage chunk when the backend did not.

    Raises:
        ProviderError: ``"<label> completion error: <cause>"``.
    """
    ctx = LogContext(provider=provider, model=model)
    t0 = time.perf_counter()
    emitted = 0
    usage: Optional[UsageChunk] = None
    ended_on_usage = False
    normalized_log_event(logger, "stream.start", ctx, phase="start", attempt=None, emitted=False)
    try:
        async for chunk in source:
            if isinstance(chunk, UsageChunk):
                usage = chunk
                ended_on_usage = True
            else:
                ended_on_usage = False
            emitted += 1
            yield chunk
    except Exception as exc:
        err = wrap_completion_error(exc, label=label, provider=provider, model=model)
        normalized_log_event(
            logger,
            "stream.error",
            ctx,
            phase="error",
            error_code=err.code.value,
            emitted=emitted,
            tokens=_usage_tokens(usage),
            level=logging.ERROR,
            error=err.message,
        )
        if err is exc:
            raise
        raise err from exc
    finally:
        await source.aclose()

    if ensure_usage and not ended_on_usage:
        usage = usage or UsageChunk()
        emitted += 1
        yield usage
    normalized_log_event(
        logger,
        "stream.end",
        ctx,
        phase="finalize",
        emitted=emitted,
        tokens=_usage_tokens(usage),
        duration_ms=int((time.perf_counter() - t0) * 1000),
    )


async def guard_call(
    call: Awaitable[T],
    *,
    label: str,
    provider: str,
    model: Optional[str],
    logger: logging.Logger,
) -> T:
    """Await a one-shot backend call, wrapping failures like ``guard_stream`` does."""
    try:
        return await call
    except Exception as exc:
        err = wrap_completion_error(exc, label=label, provider=provider, model=model)
        normalized_log_event(
            logger,
            "complete_once.error",
            LogContext(provider=provider, model=model),
            phase="error",
            error_code=err.code.value,
            level=logging.ERROR,
            error=err.message,
        )
        if err is exc:
            raise
        raise err from exc


async def iter_frames(
    frames: AsyncIterable[Any],
    convert: FrameConverter,
    ctx: LogContext,
    logger: logging.Logger,
) -> AsyncGenerator[StreamChunk, None]:
    """Convert each frame with ``convert``; malformed frames are logged and skipped."""
    async for frame in frames:
        try:
            chunks = list(convert(frame))
        except _FRAME_ERRORS as exc:
            log_event(
                logger,
                "stream.frame_skipped",
                ctx,
                level=logging.WARNING,
                error=f"{exc.__class__.__name__}: {exc}",
            )
            continue
        for chunk in chunks:
            yield chunk


__all__ = ["guard_stream", "guard_call", "iter_frames", "FrameConverter"]
