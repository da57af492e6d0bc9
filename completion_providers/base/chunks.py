"""Canonical stream chunk contract.

Every adapter's ``stream_completion`` is an async generator of the chunk
types defined here, regardless of the backend wire format:

* :class:`TextChunk` - incremental reply text. Concatenating text chunks in
  emission order reconstructs the full reply.
* :class:`ReasoningChunk` - optional backend "thinking" text; may interleave
  with text chunks.
* :class:`UsageChunk` - token/cost accounting. May appear more than once; the
  final occurrence reflects the request totals.

A stream is forward-only and finite. It ends after a usage chunk or by
raising a ``ProviderError``; no chunk follows an error.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Iterable, Literal, Optional, Union


@dataclass(frozen=True)
class TextChunk:
    """Incremental reply text."""

    text: str
    type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ReasoningChunk:
    """Incremental backend reasoning ("thinking") text."""

    text: str
    type: Literal["reasoning"] = field(default="reasoning", init=False)


@dataclass(frozen=True)
class UsageChunk:
    """Token accounting for the request so far.

    Attributes:
        input_tokens: Prompt tokens billed at the fresh-input rate.
        output_tokens: Generated tokens.
        cache_write_tokens: Tokens written to a backend prompt cache, when reported.
        cache_read_tokens: Tokens served from a backend prompt cache, when reported.
        total_cost: Backend-reported total cost in USD, when reported.
    """

    input_tokens: int = 0
    output_tokens: int = 0
    cache_write_tokens: Optional[int] = None
    cache_read_tokens: Optional[int] = None
    total_cost: Optional[float] = None
    type: Literal["usage"] = field(default="usage", init=False)


StreamChunk = Union[TextChunk, ReasoningChunk, UsageChunk]
ApiStream = AsyncIterator[StreamChunk]


async def collect_text(stream: ApiStream) -> str:
    """Drain ``stream`` and return the concatenated reply text."""
    parts = []
    async for chunk in stream:
        if isinstance(chunk, TextChunk):
            parts.append(chunk.text)
    return "".join(parts)


def last_usage(chunks: Iterable[StreamChunk]) -> Optional[UsageChunk]:
    """Return the final usage chunk in ``chunks`` or ``None``."""
    found: Optional[UsageChunk] = None
    for chunk in chunks:
        if isinstance(chunk, UsageChunk):
            found = chunk
    return found


__all__ = [
    "TextChunk",
    "ReasoningChunk",
    "UsageChunk",
    "StreamChunk",
    "ApiStream",
    "collect_text",
    "last_usage",
]
