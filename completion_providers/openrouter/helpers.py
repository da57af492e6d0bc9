"""Model rules and payload decoding for the OpenRouter gateway."""

from __future__ import annotations

from typing import Any, Iterator, Optional

from ..base.chunks import StreamChunk, UsageChunk
from ..base.errors import ErrorCode, ProviderError
from ..base.errors_parts.classification import _HTTP_STATUS_MAP
from ..formats._fields import as_int, get_field
from ..formats.openai_format import openai_frame_to_chunks

_LONG_OUTPUT_MODELS = frozenset(
    f"anthropic/{name}{suffix}"
    for name in ("claude-3.5-sonnet", "claude-3.5-sonnet-20240620", "claude-3-5-haiku", "claude-3-5-haiku-20241022")
    for suffix in ("", ":beta")
)

CACHE_MARKER_MODELS = _LONG_OUTPUT_MODELS | frozenset(
    f"anthropic/{name}{suffix}" for name in ("claude-3-haiku", "claude-3-opus") for suffix in ("", ":beta")
)

R1_MODEL_PREFIXES = ("deepseek/deepseek-r1", "perplexity/sonar-reasoning")


def wants_cache_markers(model_id: str) -> bool:
    return model_id in CACHE_MARKER_MODELS


def fixed_max_tokens(model_id: str) -> Optional[int]:
    """Anthropic 3.5 routes need an explicit output cap; others use the backend's."""
    return 8192 if model_id in _LONG_OUTPUT_MODELS else None


def is_r1_family(model_id: str) -> bool:
    return model_id.startswith(R1_MODEL_PREFIXES)


def raise_for_inband_error(payload: Any, model: Optional[str] = None) -> None:
    """Raise when a frame or response carries OpenRouter's ``error`` object."""
    error = get_field(payload, "error")
    if error is None:
        return
    status = get_field(error, "code")
    message = get_field(error, "message", default="Unknown error")
    code = _HTTP_STATUS_MAP.get(status, ErrorCode.UNKNOWN) if isinstance(status, int) else ErrorCode.UNKNOWN
    raise ProviderError(
        code=code,
        message=f"OpenRouter API Error {status}: {message}",
        provider="openrouter",
        model=model,
    )


class GenerationFrames:
    """Frame converter that remembers the generation id of the stream.

    OpenRouter repeats the generation id on every frame; the first one is
    kept for the usage lookup. Usage is never read in-band.
    """

    def __init__(self, model: Optional[str] = None) -> None:
        self.model = model
        self.generation_id: Optional[str] = None

    def __call__(self, frame: Any) -> Iterator[StreamChunk]:
        raise_for_inband_error(frame, self.model)
        if self.generation_id is None:
            self.generation_id = get_field(frame, "id")
        for chunk in openai_frame_to_chunks(frame):
            if not isinstance(chunk, UsageChunk):
                yield chunk


def generation_usage(body: Any) -> UsageChunk:
    """Usage from a ``/generation`` response body; absent counters read as 0."""
    data = get_field(body, "data")
    cost = get_field(data, "total_cost")
    return UsageChunk(
        input_tokens=as_int(get_field(data, "native_tokens_prompt")),
        output_tokens=as_int(get_field(data, "native_tokens_completion")),
        total_cost=float(cost) if isinstance(cost, (int, float)) else 0.0,
    )


__all__ = [
    "CACHE_MARKER_MODELS",
    "R1_MODEL_PREFIXES",
    "wants_cache_markers",
    "fixed_max_tokens",
    "is_r1_family",
    "raise_for_inband_error",
    "GenerationFrames",
    "generation_usage",
]
