"""LmStudioAdapter.

Talks to a local LM Studio server through its OpenAI-compatible ``/v1`` API.
LM Studio returns no useful error body, so every failure carries a fixed
hint pointing at its developer logs instead of the transport message.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Optional, Sequence

import openai

from ..base.chunks import ApiStream, StreamChunk
from ..base.dto import AdapterConfiguration
from ..base.errors import ErrorCode, ProviderError, classify_exception
from ..base.logging import get_logger
from ..base.model_catalog import OPENAI_MODEL_INFO_SANE_DEFAULTS, resolve_passthrough_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import OpenAICompatibleStreamer, build_openai_messages
from ..base.streaming import guard_call
from ..config.defaults import DEFAULT_TEMPERATURE, LMSTUDIO_DEFAULT_BASE_URL
from ..formats.openai_format import openai_response_text

LMSTUDIO_ERROR_HINT = (
    "Please check the LM Studio developer logs to debug what went wrong. "
    "You may need to load the model with a larger context length to work with its prompts."
)


def _hinted(exc: Exception, model: str) -> ProviderError:
    code = classify_exception(exc)
    return ProviderError(
        code=code if code is not ErrorCode.UNKNOWN else ErrorCode.UNAVAILABLE,
        message=LMSTUDIO_ERROR_HINT,
        provider="lmstudio",
        model=model,
        raw=exc,
    )


class LmStudioAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("lmstudio")
        base = (self.configuration.base_url or LMSTUDIO_DEFAULT_BASE_URL).rstrip("/")
        self._streamer = OpenAICompatibleStreamer(
            client or openai.AsyncOpenAI(base_url=f"{base}/v1", api_key="noop"),
            provider="lmstudio",
            label="LM Studio",
            model_id=self.describe_model().id,
            logger=get_logger("providers.lmstudio"),
        )

    @property
    def provider_name(self) -> str:
        return "lmstudio"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_passthrough_model(cfg.api_model_id, cfg.custom_model_info, "", OPENAI_MODEL_INFO_SANE_DEFAULTS)

    def _temperature(self) -> float:
        t = self.configuration.temperature
        return DEFAULT_TEMPERATURE if t is None else t

    async def _chunks(self, system_prompt: str, messages: Sequence[Message]) -> AsyncGenerator[StreamChunk, None]:
        model_id = self.describe_model().id
        try:
            response = await self._streamer.client.chat.completions.create(
                model=model_id,
                messages=build_openai_messages(system_prompt, messages),
                temperature=self._temperature(),
                stream=True,
            )
            async for chunk in self._streamer.frames(response):
                yield chunk
        except Exception as exc:
            raise _hinted(exc, model_id) from exc

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._streamer.guard(self._chunks(system_prompt, messages))

    async def _complete(self, prompt: str) -> str:
        model_id = self.describe_model().id
        try:
            response = await self._streamer.client.chat.completions.create(
                model=model_id,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature(),
                stream=False,
            )
        except Exception as exc:
            raise _hinted(exc, model_id) from exc
        return openai_response_text(response)

    async def complete_once(self, prompt: str) -> str:
        return await guard_call(
            self._complete(prompt),
            label=self._streamer.label,
            provider=self.provider_name,
            model=self.describe_model().id,
            logger=self._streamer.logger,
        )


__all__ = ["LmStudioAdapter", "LMSTUDIO_ERROR_HINT"]
