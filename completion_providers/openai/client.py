"""OpenAIAdapter.

Streams through ``openai.AsyncOpenAI`` (or ``openai.AsyncAzureOpenAI`` for
Azure hosts) against any chat-completions endpoint.

Request shape by model and endpoint:

* ``deepseek-reasoner`` models: R1 message format with the system prompt as
  a leading user turn; default temperature 0.6.
* Volcengine Ark (``.volces.com``) endpoints: plain string messages.
* Everything else: OpenAI message format, default temperature 0.

``stream_options.include_usage`` is always requested; ``max_tokens`` only
with ``include_max_tokens``. With ``streaming_enabled=False`` a single
non-streaming call is made and its text and usage are yielded.

Gateways that speak the same protocol (DeepSeek, Requesty, Unbound) compose
this adapter with their own endpoint, descriptor and usage flags.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, Optional, Sequence

import openai

from ..base.chunks import ApiStream, StreamChunk, TextChunk
from ..base.dto import AdapterConfiguration
from ..base.logging import get_logger
from ..base.model_catalog import OPENAI_MODEL_INFO_SANE_DEFAULTS, resolve_passthrough_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import MessageStyle, OpenAICompatibleStreamer, build_openai_messages
from ..config.defaults import (
    AZURE_OPENAI_DEFAULT_API_VERSION,
    DEEPSEEK_REASONER_TEMPERATURE,
    DEFAULT_TEMPERATURE,
    OPENAI_DEFAULT_BASE_URL,
)
from ..formats.cache_markers import apply_openai_cache_markers
from ..formats.openai_format import openai_response_text, openai_usage_chunk
from .helpers import is_ark_endpoint, is_azure, is_deepseek_reasoner


def build_client(cfg: AdapterConfiguration, base_url: str, api_key: Optional[str]) -> Any:
    if is_azure(base_url, cfg.use_azure):
        return openai.AsyncAzureOpenAI(
            base_url=base_url,
            api_key=api_key or "not-provided",
            api_version=cfg.azure_api_version or AZURE_OPENAI_DEFAULT_API_VERSION,
        )
    return openai.AsyncOpenAI(
        base_url=base_url,
        api_key=api_key or "not-provided",
        default_headers=cfg.headers or None,
    )


class OpenAIAdapter:
    """Adapter for OpenAI-compatible chat-completions endpoints."""

    def __init__(
        self,
        configuration: Optional[AdapterConfiguration] = None,
        *,
        client: Any = None,
        provider: str = "openai",
        label: str = "OpenAI",
        descriptor: Optional[ModelDescriptor] = None,
        include_cache_usage: bool = False,
        cache_markers: bool = False,
    ) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings(provider)
        cfg = self.configuration
        self.base_url = cfg.base_url or OPENAI_DEFAULT_BASE_URL
        self._provider = provider
        self._descriptor = descriptor
        self._cache_markers = cache_markers
        self._client = client or build_client(cfg, self.base_url, cfg.api_key)
        self._streamer = OpenAICompatibleStreamer(
            self._client,
            provider=provider,
            label=label,
            model_id=self.describe_model().id,
            logger=get_logger(f"providers.{provider}"),
            include_cache_usage=include_cache_usage,
        )

    @property
    def provider_name(self) -> str:
        return self._provider

    def describe_model(self) -> ModelDescriptor:
        if self._descriptor is not None:
            return self._descriptor
        cfg = self.configuration
        return resolve_passthrough_model(
            cfg.api_model_id, cfg.custom_model_info, "", OPENAI_MODEL_INFO_SANE_DEFAULTS
        )

    def _style(self, model_id: str) -> MessageStyle:
        if is_deepseek_reasoner(model_id):
            return MessageStyle.R1
        if is_ark_endpoint(self.base_url):
            return MessageStyle.SIMPLE
        return MessageStyle.OPENAI

    def _temperature(self, model_id: str) -> float:
        if self.configuration.temperature is not None:
            return self.configuration.temperature
        return DEEPSEEK_REASONER_TEMPERATURE if is_deepseek_reasoner(model_id) else DEFAULT_TEMPERATURE

    def _messages(self, system_prompt: str, messages: Sequence[Message], *, system_role: str = "system") -> list:
        model_id = self.describe_model().id
        converted = build_openai_messages(
            system_prompt, messages, style=self._style(model_id), system_role=system_role
        )
        return apply_openai_cache_markers(converted) if self._cache_markers else converted

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model = self.describe_model()
        request: Dict[str, Any] = {
            "model": model.id,
            "temperature": self._temperature(model.id),
            "messages": self._messages(system_prompt, messages),
            "stream_options": {"include_usage": True},
        }
        if self.configuration.include_max_tokens:
            request["max_tokens"] = model.info.max_tokens
        return request

    async def _single_response(
        self, system_prompt: str, messages: Sequence[Message]
    ) -> AsyncGenerator[StreamChunk, None]:
        # endpoints without streaming (o1 and similar) also reject a system role
        model = self.describe_model()
        response = await self._streamer.client.chat.completions.create(
            model=model.id,
            messages=self._messages(system_prompt, messages, system_role="user"),
        )
        yield TextChunk(text=openai_response_text(response))
        yield openai_usage_chunk(getattr(response, "usage", None), include_cache=self._streamer.include_cache_usage)

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        if not self.configuration.streaming_enabled:
            return self._streamer.guard(self._single_response(system_prompt, messages))
        return self._streamer.stream(self.build_request(system_prompt, messages))

    async def complete_once(self, prompt: str) -> str:
        return await self._streamer.complete(
            {"model": self.describe_model().id, "messages": [{"role": "user", "content": prompt}]}
        )


__all__ = ["OpenAIAdapter", "build_client"]
