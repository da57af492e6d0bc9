"""OpenAINativeAdapter.

First-party OpenAI models from a fixed table. Reasoning families need their
own request shapes:

* ``o1``: system prompt as a ``developer`` message prefixed with
  ``"Formatting re-enabled"``.
* ``o1-preview`` / ``o1-mini``: no developer role; the prompt is a user turn.
* ``o3-mini*``: sent as ``o3-mini`` with a developer message and the table's
  ``reasoning_effort`` (``o3-mini-high`` selects ``"high"``).
* Other models: system role and temperature 0.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import openai

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.logging import get_logger
from ..base.model_catalog import OPENAI_NATIVE_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.openai_compatible import OpenAICompatibleStreamer, build_openai_messages
from ..config.defaults import DEFAULT_TEMPERATURE, OPENAI_NATIVE_DEFAULT_MODEL

_FORMATTING_PREFIX = "Formatting re-enabled\n"


class OpenAINativeAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("openai-native")
        cfg = self.configuration
        self._streamer = OpenAICompatibleStreamer(
            client or openai.AsyncOpenAI(api_key=cfg.api_key or "not-provided", base_url=cfg.base_url or None),
            provider="openai-native",
            label="OpenAI Native",
            model_id=self.describe_model().id,
            logger=get_logger("providers.openai-native"),
        )

    @property
    def provider_name(self) -> str:
        return "openai-native"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(OPENAI_NATIVE_MODELS, self.configuration.api_model_id, OPENAI_NATIVE_DEFAULT_MODEL)

    def _temperature(self) -> float:
        t = self.configuration.temperature
        return DEFAULT_TEMPERATURE if t is None else t

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model = self.describe_model()
        request: Dict[str, Any] = {"stream_options": {"include_usage": True}}
        if model.id.startswith("o1"):
            if model.id == "o1":
                system_role, system_prompt = "developer", _FORMATTING_PREFIX + system_prompt
            else:
                system_role = "user"
            request["model"] = model.id
        elif model.id.startswith("o3-mini"):
            system_role, system_prompt = "developer", _FORMATTING_PREFIX + system_prompt
            request["model"] = "o3-mini"
            request["reasoning_effort"] = model.info.reasoning_effort
        else:
            system_role = "system"
            request["model"] = model.id
            request["temperature"] = self._temperature()
        request["messages"] = build_openai_messages(system_prompt, messages, system_role=system_role)
        return request

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._streamer.stream(self.build_request(system_prompt, messages))

    async def complete_once(self, prompt: str) -> str:
        model = self.describe_model()
        request: Dict[str, Any] = {"model": model.id, "messages": [{"role": "user", "content": prompt}]}
        if model.id.startswith("o3-mini"):
            request["model"] = "o3-mini"
            request["reasoning_effort"] = model.info.reasoning_effort
        elif not model.id.startswith("o1"):
            request["temperature"] = self._temperature()
        return await self._streamer.complete(request)


__all__ = ["OpenAINativeAdapter"]
