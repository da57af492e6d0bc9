"""OllamaAdapter.

Talks to a local Ollama server through its OpenAI-compatible ``/v1`` API.
``deepseek-r1`` models get the R1 message format. Ollama reports no usage
in-band, so streams close with a zero usage chunk.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import openai

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.logging import get_logger
from ..base.model_catalog import OPENAI_MODEL_INFO_SANE_DEFAULTS, resolve_passthrough_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import OpenAICompatibleStreamer
from ..config.defaults import DEEPSEEK_REASONER_TEMPERATURE, DEFAULT_TEMPERATURE, OLLAMA_DEFAULT_BASE_URL
from ..formats.openai_format import convert_to_openai_messages
from ..formats.r1_format import convert_to_r1_format


class OllamaAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("ollama")
        base = (self.configuration.base_url or OLLAMA_DEFAULT_BASE_URL).rstrip("/")
        self._streamer = OpenAICompatibleStreamer(
            client or openai.AsyncOpenAI(base_url=f"{base}/v1", api_key="ollama"),
            provider="ollama",
            label="Ollama",
            model_id=self.describe_model().id,
            logger=get_logger("providers.ollama"),
        )

    @property
    def provider_name(self) -> str:
        return "ollama"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_passthrough_model(cfg.api_model_id, cfg.custom_model_info, "", OPENAI_MODEL_INFO_SANE_DEFAULTS)

    def _uses_r1(self) -> bool:
        return "deepseek-r1" in self.describe_model().id.lower()

    def _temperature(self, default: float = DEFAULT_TEMPERATURE) -> float:
        t = self.configuration.temperature
        return default if t is None else t

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        body = convert_to_r1_format(messages) if self._uses_r1() else convert_to_openai_messages(messages)
        return self._streamer.stream(
            {
                "model": self.describe_model().id,
                "messages": [{"role": "system", "content": system_prompt}, *body],
                "temperature": self._temperature(),
            }
        )

    async def complete_once(self, prompt: str) -> str:
        r1 = self._uses_r1()
        prompt_message = Message(role="user", content=prompt)
        messages = convert_to_r1_format([prompt_message]) if r1 else [{"role": "user", "content": prompt}]
        return await self._streamer.complete(
            {
                "model": self.describe_model().id,
                "messages": messages,
                "temperature": self._temperature(DEEPSEEK_REASONER_TEMPERATURE if r1 else DEFAULT_TEMPERATURE),
                "stream": False,
            }
        )


__all__ = ["OllamaAdapter"]
