"""VertexAdapter.

Claude models served by Google Vertex AI through
``anthropic.AsyncAnthropicVertex``. Event decoding is shared with the
Anthropic adapter.

Context caching: when ``vertex_context`` is configured it is sent as a second
system block with an ephemeral ``cache_control`` marker. On the first such
request for a cache-capable model the adapter schedules a keep-warm session
with its :class:`CacheRefreshScheduler`; ``dispose()`` stops it. Usage of
every request is recorded in a :class:`CacheUsageTracker` under a fresh
request id (``last_request_id``).
"""

from __future__ import annotations

import uuid
from typing import Any, AsyncGenerator, Dict, Optional, Sequence

import anthropic

from ..anthropic.helpers import first_text, max_tokens_for, with_cumulative_usage
from ..base.chunks import ApiStream, StreamChunk, UsageChunk
from ..base.dto import AdapterConfiguration
from ..base.logging import LogContext, get_logger
from ..base.model_catalog import VERTEX_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.streaming import guard_call, guard_stream, iter_frames
from ..cache.refresh import CacheRefreshScheduler
from ..cache.tracker import CacheUsageTracker
from ..config.defaults import DEFAULT_TEMPERATURE, VERTEX_DEFAULT_MODEL, VERTEX_DEFAULT_REGION
from ..formats.anthropic_format import anthropic_event_to_chunks, block_to_anthropic, system_blocks


def _raw_usage(chunk: UsageChunk) -> Dict[str, int]:
    return {
        "input_tokens": chunk.input_tokens,
        "output_tokens": chunk.output_tokens,
        "cache_creation_input_tokens": chunk.cache_write_tokens or 0,
        "cache_read_input_tokens": chunk.cache_read_tokens or 0,
    }


class VertexAdapter:
    """Adapter for Claude on Vertex AI with context-cache keep-warm."""

    label = "Vertex"

    def __init__(
        self,
        configuration: Optional[AdapterConfiguration] = None,
        *,
        client: Any = None,
        scheduler: Optional[CacheRefreshScheduler] = None,
        tracker: Optional[CacheUsageTracker] = None,
    ) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("vertex")
        cfg = self.configuration
        self._client = client or anthropic.AsyncAnthropicVertex(
            project_id=cfg.vertex_project_id or "not-provided",
            region=cfg.vertex_region or VERTEX_DEFAULT_REGION,
        )
        self._owns_scheduler = scheduler is None
        self.scheduler = scheduler or CacheRefreshScheduler()
        self.tracker = tracker or CacheUsageTracker()
        self._active_cache_id: Optional[str] = None
        self.last_request_id: Optional[str] = None
        self._logger = get_logger("providers.vertex")

    @property
    def provider_name(self) -> str:
        return "vertex"

    @property
    def active_cache_id(self) -> Optional[str]:
        return self._active_cache_id

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(VERTEX_MODELS, self.configuration.api_model_id, VERTEX_DEFAULT_MODEL)

    def _temperature(self) -> float:
        t = self.configuration.temperature
        return DEFAULT_TEMPERATURE if t is None else t

    def _system(self, system_prompt: str) -> list:
        system = system_blocks(system_prompt)
        context = self.configuration.vertex_context
        if context:
            system += system_blocks(context, cache=True)
            if self._active_cache_id is None and self.describe_model().info.supports_prompt_cache:
                self._active_cache_id = self.scheduler.schedule(self, system_prompt, context)
        return system

    async def _events(self, system_prompt: str, messages: Sequence[Message]) -> AsyncGenerator[StreamChunk, None]:
        model = self.describe_model()
        request_id = str(uuid.uuid4())
        self.last_request_id = request_id
        stream = await self._client.messages.create(
            model=model.id,
            max_tokens=max_tokens_for(model.info),
            temperature=self._temperature(),
            system=self._system(system_prompt),
            messages=[
                {"role": m.role, "content": [block_to_anthropic(b) for b in m.blocks()]} for m in messages
            ],
            stream=True,
        )
        ctx = LogContext(provider=self.provider_name, model=model.id, request_id=request_id)
        async for chunk in with_cumulative_usage(iter_frames(stream, anthropic_event_to_chunks, ctx, self._logger)):
            if isinstance(chunk, UsageChunk):
                self.tracker.record_usage(request_id, _raw_usage(chunk), model.info)
            yield chunk

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return guard_stream(
            self._events(system_prompt, messages),
            label=self.label,
            provider=self.provider_name,
            model=self.describe_model().id,
            logger=self._logger,
        )

    async def complete_once(self, prompt: str) -> str:
        model = self.describe_model()
        response = await guard_call(
            self._client.messages.create(
                model=model.id,
                max_tokens=max_tokens_for(model.info),
                temperature=self._temperature(),
                messages=[{"role": "user", "content": [{"type": "text", "text": prompt}]}],
                stream=False,
            ),
            label=self.label,
            provider=self.provider_name,
            model=model.id,
            logger=self._logger,
        )
        return first_text(response)

    def dispose(self) -> None:
        """Stop this adapter's cache session and clear recorded usage. Idempotent."""
        if self._active_cache_id is not None:
            self.scheduler.stop(self._active_cache_id)
            self._active_cache_id = None
        if self._owns_scheduler:
            self.scheduler.dispose_all()
        self.tracker.cleanup()


__all__ = ["VertexAdapter"]
