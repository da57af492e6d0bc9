"""OpenRouterAdapter.

OpenRouter is an OpenAI-compatible gateway. Differences from plain OpenAI:

- Anthropic routes get prompt-cache markers and some need ``max_tokens``.
- DeepSeek R1 and Perplexity reasoning routes take the R1 message format.
- Errors can arrive in-band as an ``error`` object on a frame.
- Usage and cost are not streamed; they are looked up after the stream from
  ``/generation?id=<id>`` under a bounded retry and omitted when the record
  never becomes available.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, Optional, Sequence

import httpx
import openai

from ..base.chunks import ApiStream, StreamChunk, UsageChunk
from ..base.dto import AdapterConfiguration
from ..base.http import get_async_client
from ..base.logging import get_logger
from ..base.model_catalog import OPENROUTER_DEFAULT_MODEL_INFO, resolve_open_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import MessageStyle, OpenAICompatibleStreamer, build_openai_messages
from ..base.streaming import guard_call
from ..base.usage_fetch import fetch_usage_with_retry
from ..config.defaults import (
    APP_REFERER,
    APP_TITLE,
    DEEPSEEK_REASONER_TEMPERATURE,
    DEEPSEEK_REASONER_TOP_P,
    DEFAULT_TEMPERATURE,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    USAGE_FETCH_DELAY_SECONDS,
    USAGE_FETCH_TIMEOUT_SECONDS,
)
from ..formats.cache_markers import apply_openai_cache_markers
from ..formats.openai_format import openai_response_text
from .helpers import (
    GenerationFrames,
    fixed_max_tokens,
    generation_usage,
    is_r1_family,
    raise_for_inband_error,
    wants_cache_markers,
)


class OpenRouterAdapter:
    # Seconds between usage lookups; the first lookup waits too.
    usage_fetch_delay: float = USAGE_FETCH_DELAY_SECONDS

    def __init__(
        self,
        configuration: Optional[AdapterConfiguration] = None,
        *,
        client: Any = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("openrouter")
        cfg = self.configuration
        self.base_url = (cfg.base_url or OPENROUTER_DEFAULT_BASE_URL).rstrip("/")
        self.logger = get_logger("providers.openrouter")
        self._http = http_client
        self._streamer = OpenAICompatibleStreamer(
            client
            or openai.AsyncOpenAI(
                base_url=self.base_url,
                api_key=cfg.api_key or "not-provided",
                default_headers={"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE, **cfg.headers},
            ),
            provider="openrouter",
            label="OpenRouter",
            model_id=self.describe_model().id,
            logger=self.logger,
        )

    @property
    def provider_name(self) -> str:
        return "openrouter"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_open_model(
            cfg.api_model_id, cfg.custom_model_info, OPENROUTER_DEFAULT_MODEL, OPENROUTER_DEFAULT_MODEL_INFO
        )

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model_id = self.describe_model().id
        r1 = is_r1_family(model_id)
        body = build_openai_messages(system_prompt, messages, style=MessageStyle.R1 if r1 else MessageStyle.OPENAI)
        if wants_cache_markers(model_id):
            body = apply_openai_cache_markers(body)
        temperature = self.configuration.temperature
        if temperature is None:
            temperature = DEEPSEEK_REASONER_TEMPERATURE if r1 else DEFAULT_TEMPERATURE
        request: Dict[str, Any] = {
            "model": model_id,
            "messages": body,
            "temperature": temperature,
            "include_reasoning": True,
        }
        max_tokens = fixed_max_tokens(model_id)
        if max_tokens is not None:
            request["max_tokens"] = max_tokens
        if r1:
            request["top_p"] = DEEPSEEK_REASONER_TOP_P
        if self.configuration.use_middle_out_transform:
            request["transforms"] = ["middle-out"]
        return request

    def _usage_client(self) -> httpx.AsyncClient:
        return self._http or get_async_client(None, "usage")

    async def fetch_generation_usage(self, generation_id: str) -> Optional[UsageChunk]:
        """Look up usage for ``generation_id``; ``None`` when it never resolves."""

        async def _lookup() -> UsageChunk:
            response = await self._usage_client().get(
                f"{self.base_url}/generation",
                params={"id": generation_id},
                headers={"Authorization": f"Bearer {self.configuration.api_key}"},
                timeout=USAGE_FETCH_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
            return generation_usage(response.json())

        return await fetch_usage_with_retry(
            _lookup,
            provider="openrouter",
            model=self.describe_model().id,
            logger=self.logger,
            delay_seconds=self.usage_fetch_delay,
            initial_delay=self.usage_fetch_delay,
        )

    async def _chunks(self, request: Dict[str, Any]) -> AsyncGenerator[StreamChunk, None]:
        frames = GenerationFrames(request["model"])
        response = await self._streamer.client.chat.completions.create(**request, stream=True)
        async for chunk in self._streamer.frames(response, frames):
            yield chunk
        if frames.generation_id is None:
            return
        usage = await self.fetch_generation_usage(frames.generation_id)
        if usage is not None:
            yield usage

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._streamer.guard(self._chunks(self.build_request(system_prompt, messages)), ensure_usage=False)

    async def _complete(self, request: Dict[str, Any]) -> str:
        response = await self._streamer.client.chat.completions.create(**request)
        raise_for_inband_error(response, request["model"])
        return openai_response_text(response)

    async def complete_once(self, prompt: str) -> str:
        model_id = self.describe_model().id
        temperature = self.configuration.temperature
        request = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
            "stream": False,
        }
        return await guard_call(
            self._complete(request), label="OpenRouter", provider="openrouter", model=model_id, logger=self.logger
        )


__all__ = ["OpenRouterAdapter"]
