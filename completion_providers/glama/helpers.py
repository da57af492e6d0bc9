"""Model rules and payload decoding for the Glama gateway."""

from __future__ import annotations

import json
from typing import Any, Iterator, Optional

from ..base.chunks import StreamChunk, UsageChunk
from ..formats._fields import as_int, get_field
from ..formats.openai_format import openai_frame_to_chunks

GLAMA_METADATA_HEADER = "X-Glama-Metadata"
COMPLETION_REQUEST_ID_HEADER = "x-completion-request-id"


def metadata_header(app: str) -> str:
    return json.dumps({"labels": [{"key": "app", "value": app}]})


def wants_cache_markers(model_id: str) -> bool:
    return model_id.startswith("anthropic/claude-3")


def fixed_max_tokens(model_id: str) -> Optional[int]:
    return 8192 if model_id.startswith("anthropic/") else None


def supports_temperature(model_id: str) -> bool:
    return not model_id.startswith("openai/o3-mini")


def text_frames(frame: Any) -> Iterator[StreamChunk]:
    """Decode a streamed frame ignoring in-band usage; Glama reports it out-of-band."""
    for chunk in openai_frame_to_chunks(frame):
        if not isinstance(chunk, UsageChunk):
            yield chunk


def completion_request_usage(body: Any) -> UsageChunk:
    """Usage from a ``/completion-requests/<id>`` body.

    Raises:
        LookupError: the record has no token usage or cost yet.
    """
    usage = get_field(body, "tokenUsage")
    cost = get_field(body, "totalCostUsd")
    if not usage or not cost:
        raise LookupError("completion request is not settled yet")
    return UsageChunk(
        input_tokens=as_int(get_field(usage, "promptTokens")),
        output_tokens=as_int(get_field(usage, "completionTokens")),
        cache_write_tokens=as_int(get_field(usage, "cacheCreationInputTokens")),
        cache_read_tokens=as_int(get_field(usage, "cacheReadInputTokens")),
        total_cost=float(cost),
    )


__all__ = [
    "GLAMA_METADATA_HEADER",
    "COMPLETION_REQUEST_ID_HEADER",
    "metadata_header",
    "wants_cache_markers",
    "fixed_max_tokens",
    "supports_temperature",
    "text_frames",
    "completion_request_usage",
]
