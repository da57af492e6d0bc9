"""MistralAdapter.

Talks to the Mistral chat completions endpoint over ``httpx`` and decodes the
server-sent events itself. ``codestral-*`` models are served from the
Codestral host (overridable with ``codestral_url``).
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Dict, List, Optional, Sequence

import httpx

from ..base.chunks import ApiStream, StreamChunk
from ..base.dto import AdapterConfiguration
from ..base.errors import ErrorCode, ProviderError
from ..base.http import new_async_client
from ..base.logging import LogContext, get_logger
from ..base.model_catalog import MISTRAL_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.streaming import guard_call, guard_stream, iter_frames
from ..config.defaults import (
    DEFAULT_TEMPERATURE,
    MISTRAL_CODESTRAL_BASE_URL,
    MISTRAL_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
)
from ..formats._fields import get_field
from ..formats.mistral_format import convert_to_mistral_messages, mistral_content_text, mistral_frame_to_chunks

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


async def sse_data(lines: AsyncGenerator[str, None]) -> AsyncGenerator[str, None]:
    """Yield the payload of each ``data:`` line; comments and other fields are ignored."""
    async for line in lines:
        if line.startswith("data:"):
            yield line[len("data:"):].strip()


class MistralAdapter:
    label = "Mistral"

    def __init__(
        self,
        configuration: Optional[AdapterConfiguration] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        cfg = configuration or AdapterConfiguration.from_settings("mistral")
        if not cfg.api_key:
            raise ProviderError(code=ErrorCode.AUTH, message="Mistral API key is required", provider="mistral")
        self.configuration = cfg
        # injected clients belong to the caller; a lazily built one belongs to this adapter
        self._client = client
        self._owns_client = client is None
        self._logger = get_logger("providers.mistral")

    @property
    def provider_name(self) -> str:
        return "mistral"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(MISTRAL_MODELS, self.configuration.api_model_id, MISTRAL_DEFAULT_MODEL)

    def base_url(self) -> str:
        if self.describe_model().id.startswith("codestral-"):
            return (self.configuration.codestral_url or MISTRAL_CODESTRAL_BASE_URL).rstrip("/")
        return (self.configuration.base_url or MISTRAL_DEFAULT_BASE_URL).rstrip("/")

    def _http(self) -> httpx.AsyncClient:
        if self._client is None or (self._owns_client and self._client.is_closed):
            self._client = new_async_client()
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client this adapter built; injected clients are left open."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.configuration.api_key}",
            "Accept": "text/event-stream",
            **self.configuration.headers,
        }

    def _temperature(self) -> float:
        t = self.configuration.temperature
        return DEFAULT_TEMPERATURE if t is None else t

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        model = self.describe_model()
        body: List[Dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            *convert_to_mistral_messages(messages),
        ]
        request: Dict[str, Any] = {
            "model": model.id,
            "messages": body,
            "temperature": self._temperature(),
            "stream": True,
        }
        if self.configuration.include_max_tokens and model.info.max_tokens and model.info.max_tokens > 0:
            request["max_tokens"] = model.info.max_tokens
        return request

    async def _chunks(self, request: Dict[str, Any]) -> AsyncGenerator[StreamChunk, None]:
        ctx = LogContext(provider=self.provider_name, model=request["model"])
        async with self._http().stream(
            "POST", f"{self.base_url()}{CHAT_COMPLETIONS_PATH}", json=request, headers=self._headers()
        ) as response:
            if response.is_error:
                await response.aread()
                response.raise_for_status()
            frames = sse_data(response.aiter_lines())
            async for chunk in iter_frames(frames, mistral_frame_to_chunks, ctx, self._logger):
                yield chunk

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        request = self.build_request(system_prompt, messages)
        return guard_stream(
            self._chunks(request),
            label=self.label,
            provider=self.provider_name,
            model=request["model"],
            logger=self._logger,
        )

    async def _complete(self, prompt: str) -> str:
        response = await self._http().post(
            f"{self.base_url()}{CHAT_COMPLETIONS_PATH}",
            json={
                "model": self.describe_model().id,
                "messages": [{"role": "user", "content": prompt}],
                "temperature": self._temperature(),
            },
            headers={"Authorization": f"Bearer {self.configuration.api_key}", **self.configuration.headers},
        )
        response.raise_for_status()
        choices = get_field(response.json(), "choices", default=[])
        if not choices:
            return ""
        return mistral_content_text(get_field(choices[0], "message", "content"))

    async def complete_once(self, prompt: str) -> str:
        return await guard_call(
            self._complete(prompt),
            label=self.label,
            provider=self.provider_name,
            model=self.describe_model().id,
            logger=self._logger,
        )


__all__ = ["MistralAdapter", "sse_data"]
