"""DeepSeekAdapter.

DeepSeek's API is OpenAI-compatible; this adapter configures an
:class:`OpenAIAdapter` for ``https://api.deepseek.com/v1`` with
``max_tokens`` always sent. ``deepseek-reasoner`` picks up the R1 message
format and its reasoning deltas from the generic adapter.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.model_catalog import DEEPSEEK_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..config.defaults import DEEPSEEK_DEFAULT_BASE_URL, DEEPSEEK_DEFAULT_MODEL
from ..openai.client import OpenAIAdapter


class DeepSeekAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        cfg = configuration or AdapterConfiguration.from_settings("deepseek")
        self.configuration = cfg.model_copy(
            update={
                "base_url": cfg.base_url or DEEPSEEK_DEFAULT_BASE_URL,
                "include_max_tokens": True,
                "streaming_enabled": True,
            }
        )
        self._inner = OpenAIAdapter(
            self.configuration,
            client=client,
            provider="deepseek",
            label="DeepSeek",
            descriptor=self.describe_model(),
        )

    @property
    def provider_name(self) -> str:
        return "deepseek"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(DEEPSEEK_MODELS, self.configuration.api_model_id, DEEPSEEK_DEFAULT_MODEL)

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._inner.stream_completion(system_prompt, messages)

    async def complete_once(self, prompt: str) -> str:
        return await self._inner.complete_once(prompt)


__all__ = ["DeepSeekAdapter"]
