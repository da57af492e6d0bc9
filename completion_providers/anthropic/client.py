"""AnthropicAdapter.

Streams through ``anthropic.AsyncAnthropic`` (``client.messages.create`` with
``stream=True``) and normalizes the Messages API events into canonical
chunks.

Prompt caching: for the models listed in ``_CACHE_MODELS`` the system block
and the last content block of the last two user turns carry an ephemeral
``cache_control`` marker, and the prompt-caching beta header is sent. The
``latest`` model aliases do not accept cache markers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import anthropic

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.logging import LogContext, get_logger
from ..base.model_catalog import ANTHROPIC_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.streaming import guard_call, guard_stream, iter_frames
from ..config.defaults import (
    ANTHROPIC_DEFAULT_MODEL,
    ANTHROPIC_PROMPT_CACHING_BETA,
    DEFAULT_TEMPERATURE,
)
from ..formats.anthropic_format import anthropic_event_to_chunks, convert_to_anthropic_messages, system_blocks
from .helpers import first_text, max_tokens_for, with_cumulative_usage

_CACHE_MODELS = frozenset(
    {
        "claude-3-5-sonnet-20241022",
        "claude-3-5-haiku-20241022",
        "claude-3-opus-20240229",
        "claude-3-haiku-20240307",
    }
)


class AnthropicAdapter:
    """Adapter for the Anthropic Messages API."""

    label = "Anthropic"

    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("anthropic")
        cfg = self.configuration
        self._client = client or anthropic.AsyncAnthropic(
            api_key=cfg.api_key,
            base_url=cfg.base_url or None,
            default_headers=cfg.headers or None,
        )
        self._logger = get_logger("providers.anthropic")

    @property
    def provider_name(self) -> str:
        return "anthropic"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(ANTHROPIC_MODELS, self.configuration.api_model_id, ANTHROPIC_DEFAULT_MODEL)

    def _temperature(self) -> float:
        t = self.configuration.temperature
        return DEFAULT_TEMPERATURE if t is None else t

    def _request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model = self.describe_model()
        cache = model.id in _CACHE_MODELS
        request: Dict[str, Any] = {
            "model": model.id,
            "max_tokens": max_tokens_for(model.info),
            "temperature": self._temperature(),
            "system": system_blocks(system_prompt, cache=cache),
            "messages": convert_to_anthropic_messages(messages, cache_last_user_turns=cache),
            "stream": True,
        }
        if cache:
            request["extra_headers"] = {"anthropic-beta": ANTHROPIC_PROMPT_CACHING_BETA}
        return request

    async def _events(self, system_prompt: str, messages: Sequence[Message]):
        model = self.describe_model()
        stream = await self._client.messages.create(**self._request(system_prompt, messages))
        ctx = LogContext(provider=self.provider_name, model=model.id)
        async for chunk in with_cumulative_usage(iter_frames(stream, anthropic_event_to_chunks, ctx, self._logger)):
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
                messages=[{"role": "user", "content": prompt}],
                stream=False,
            ),
            label=self.label,
            provider=self.provider_name,
            model=model.id,
            logger=self._logger,
        )
        return first_text(response)


__all__ = ["AnthropicAdapter"]
