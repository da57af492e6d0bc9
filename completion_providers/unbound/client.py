"""UnboundAdapter.

Unbound is an OpenAI-compatible gateway. ``anthropic/*`` models get prompt
cache markers on the system message and the last two user turns; usage
frames include cache counters.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..base.chunks import ApiStream
from ..base.dto import AdapterConfiguration
from ..base.errors import ErrorCode, ProviderError
from ..base.model_catalog import UNBOUND_DEFAULT_MODEL_INFO, resolve_passthrough_model
from ..base.models import Message, ModelDescriptor
from ..config.defaults import APP_REFERER, APP_TITLE, UNBOUND_DEFAULT_BASE_URL, UNBOUND_DEFAULT_MODEL
from ..openai.client import OpenAIAdapter


class UnboundAdapter:
    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        cfg = configuration or AdapterConfiguration.from_settings("unbound")
        if not cfg.api_key:
            raise ProviderError(
                code=ErrorCode.AUTH,
                message="Unbound API key is required. Please provide it in the settings.",
                provider="unbound",
            )
        self.configuration = cfg.model_copy(
            update={
                "base_url": cfg.base_url or UNBOUND_DEFAULT_BASE_URL,
                "headers": {"HTTP-Referer": APP_REFERER, "X-Title": APP_TITLE, **cfg.headers},
            }
        )
        model = self.describe_model()
        self._inner = OpenAIAdapter(
            self.configuration,
            client=client,
            provider="unbound",
            label="Unbound",
            descriptor=model,
            include_cache_usage=True,
            cache_markers=model.id.startswith("anthropic/"),
        )

    @property
    def provider_name(self) -> str:
        return "unbound"

    def describe_model(self) -> ModelDescriptor:
        cfg = self.configuration
        return resolve_passthrough_model(
            cfg.api_model_id, cfg.custom_model_info, UNBOUND_DEFAULT_MODEL, UNBOUND_DEFAULT_MODEL_INFO
        )

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return self._inner.stream_completion(system_prompt, messages)

    async def complete_once(self, prompt: str) -> str:
        return await self._inner.complete_once(prompt)


__all__ = ["UnboundAdapter"]
