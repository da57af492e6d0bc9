"""GlamaAdapter.

Glama fronts many models behind an OpenAI-compatible gateway. Claude 3 routes
get prompt-cache markers. The gateway answers every completion with an
``x-completion-request-id`` header; token usage and cost for that id are
polled after the stream under the bounded usage retry.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, Optional, Sequence

import httpx
import openai

from ..base.chunks import ApiStream, StreamChunk, UsageChunk
from ..base.dto import AdapterConfiguration
from ..base.http import get_async_client
from ..base.logging import get_logger
from ..base.model_catalog import GLAMA_DEFAULT_MODEL_INFO, resolve_open_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import OpenAICompatibleStreamer, build_openai_messages
from ..base.usage_fetch import fetch_usage_with_retry
from ..config.defaults import (
    APP_TITLE,
    DEFAULT_TEMPERATURE,
    GLAMA_COMPLETION_REQUESTS_URL,
    GLAMA_DEFAULT_BASE_URL,
    GLAMA_DEFAULT_MODEL,
    USAGE_FETCH_DELAY_SECONDS,
    USAGE_FETCH_TIMEOUT_SECONDS,
)
from ..formats.cache_markers import apply_openai_cache_markers
from .helpers import (
    COMPLETION_REQUEST_ID_HEADER,
    GLAMA_METADATA_HEADER,
    completion_request_usage,
    fixed_max_tokens,
    metadata_header,
    supports_temperature,
    text_frames,
    wants_cache_markers,
)


class GlamaAdapter:
    usage_fetch_delay: float = USAGE_FETCH_DELAY_SECONDS

    def __init__(
        self,
        configuration: Optional[AdapterConfiguration] = None,
        *,
        client: Any = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("glama")
        cfg = self.configuration
        self.logger = get_logger("providers.glama")
        self._http = http_client
        self._streamer = OpenAICompatibleStreamer(
            client
            or openai.AsyncOpenAI(
                base_url=cfg.base_url or GLAMA_DEFAULT_BASE_URL,
                api_key=cfg.api_key or "not-provided",
                default_headers=dict(cfg.headers),
            ),
            provider="glama",
            label="Glama",
            model_id=self.describe_model().id,
            logger=self.logger,
        )

    @property
    def provider_name(self) -> str:
        return "glama"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_open_model(
            cfg.api_model_id, cfg.custom_model_info, GLAMA_DEFAULT_MODEL, GLAMA_DEFAULT_MODEL_INFO
        )

    def _sampling(self, model_id: str) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if supports_temperature(model_id):
            t = self.configuration.temperature
            options["temperature"] = DEFAULT_TEMPERATURE if t is None else t
        max_tokens = fixed_max_tokens(model_id)
        if max_tokens is not None:
            options["max_tokens"] = max_tokens
        return options

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model_id = self.describe_model().id
        body = build_openai_messages(system_prompt, messages)
        if wants_cache_markers(model_id):
            body = apply_openai_cache_markers(body)
        return {"model": model_id, "messages": body, **self._sampling(model_id)}

    async def fetch_request_usage(self, request_id: str) -> Optional[UsageChunk]:
        """Poll the completion-request record until tokens and cost are settled."""

        async def _lookup() -> UsageChunk:
            client = self._http or get_async_client(None, "usage")
            response = await client.get(
                f"{GLAMA_COMPLETION_REQUESTS_URL}/{request_id}",
                headers={"Authorization": f"Bearer {self.configuration.api_key}"},
                timeout=USAGE_FETCH_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return completion_request_usage(response.json())

        return await fetch_usage_with_retry(
            _lookup,
            provider="glama",
            model=self.describe_model().id,
            logger=self.logger,
            delay_seconds=self.usage_fetch_delay,
        )

    async def _chunks(self, request: Dict[str, Any]) -> AsyncGenerator[StreamChunk, None]:
        raw = await self._streamer.client.chat.completions.with_raw_response.create(
            **request,
            stream=True,
            extra_headers={GLAMA_METADATA_HEADER: metadata_header(APP_TITLE)},
        )
        request_id = raw.headers.get(COMPLETION_REQUEST_ID_HEADER)
        async for chunk in self._streamer.frames(raw.parse(), text_frames):
            yield chunk
        if not request_id:
            return
        usage = await self.fetch_request_usage(request_id)
        if usage is not None:
            yield usage

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._streamer.guard(self._chunks(self.build_request(system_prompt, messages)), ensure_usage=False)

    async def complete_once(self, prompt: str) -> str:
        model_id = self.describe_model().id
        return await self._streamer.complete(
            {"model": model_id, "messages": [{"role": "user", "content": prompt}], **self._sampling(model_id)}
        )


__all__ = ["GlamaAdapter"]
