"""RequestyAdapter.

Requesty routes OpenAI-compatible requests to many upstream models. Any model
id is forwarded as-is; limits and prices come from ``custom_model_info`` or
conservative defaults. Usage frames include Anthropic-style cache counters.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.errors import ErrorCode, ProviderError
from ..base.model_catalog import REQUESTY_MODEL_INFO_SANE_DEFAULTS, resolve_passthrough_model
from ..base.models import Message, ModelDescriptor
from ..config.defaults import APP_REFERER, APP_TITLE, REQUESTY_DEFAULT_BASE_URL, REQUESTY_DEFAULT_MODEL
from ..openai.client import OpenAIAdapter


class RequestyAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        cfg = configuration or AdapterConfiguration.from_settings("requesty")
        if not cfg.api_key:
            raise ProviderError(
                code=ErrorCode.AUTH,
                message="Requesty API key is required. Please provide it in the settings.",
                provider="requesty",
            )
        self.configuration = cfg.model_copy(
            update={
                "base_url": cfg.base_url or REQUESTY_DEFAULT_BASE_URL,
                "headers": {"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE, **cfg.headers},
            }
        )
        self._inner = OpenAIAdapter(
            self.configuration,
            client=client,
            provider="requesty",
            label="Requesty",
            descriptor=self.describe_model(),
            include_cache_usage=True,
        )

    @property
    def provider_name(self) -> str:
        return "requesty"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_passthrough_model(
            cfg.api_model_id, cfg.custom_model_info, REQUESTY_DEFAULT_MODEL, REQUESTY_MODEL_INFO_SANE_DEFAULTS
        )

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._inner.stream_completion(system_prompt, messages)

    async def complete_once(self, prompt: str) -> str:
        return await self._inner.complete_once(prompt)


__all__ = ["RequestyAdapter"]
