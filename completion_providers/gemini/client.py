"""GeminiAdapter.

Uses the ``google-generativeai`` ``GenerativeModel`` API. The system prompt
travels as ``system_instruction``; the history converts with
:func:`convert_message_to_gemini`. Text is streamed from each partial
response and usage is read from the aggregated response once the stream is
drained.

``genai.configure`` is process-global, so it is never called here. Each
adapter owns a :class:`GeminiClient` holding its own key and its own
generative service client.
"""

from __future__ import annotations

from typing import Any, AsyncGenerator, Optional, Sequence

import google.ai.generativelanguage as glm
import google.generativeai as genai
from google.api_core import client_options as client_options_lib

from ..base.chunks import ApiStream, StreamChunk
from ..base.dto import AdapterConfiguration
from ..base.logging import LogContext, get_logger
from ..base.model_catalog import GEMINI_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.streaming import guard_call, guard_stream, iter_frames
from ..config.defaults import DEFAULT_TEMPERATURE, GEMINI_DEFAULT_MODEL
from ..formats.gemini_format import (
    convert_message_to_gemini,
    gemini_response_text,
    gemini_response_to_chunks,
    gemini_usage_chunk,
)


class GeminiClient:
    """``GenerativeModel`` factory bound to one API key.

    The async service client is created on first use, inside the running
    event loop, and shared by every model this instance hands out.
    """

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key
        self._service: Any = None

    def service(self) -> Any:
        if self._service is None:
            options = client_options_lib.ClientOptions(api_key=self.api_key)
            self._service = glm.GenerativeServiceAsyncClient(client_options=options)
        return self._service

    def GenerativeModel(self, model_name: str, system_instruction: Any = None) -> Any:  # noqa: N802 - SDK name
        model = genai.GenerativeModel(model_name, system_instruction=system_instruction)
        # preset so the SDK never falls back to its module-level default client
        model._async_client = self.service()
        return model


class GeminiAdapter:
    label = "Gemini"

    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("gemini")
        # ``client`` exposes ``GenerativeModel``; a per-adapter GeminiClient by default
        self._client = client if client is not None else GeminiClient(self.configuration.api_key or "not-provided")
        self._logger = get_logger("providers.gemini")

    @property
    def provider_name(self) -> str:
        return "gemini"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(GEMINI_MODELS, self.configuration.api_model_id, GEMINI_DEFAULT_MODEL)

    def _generation_config(self) -> dict:
        t = self.configuration.temperature
        return {"temperature": DEFAULT_TEMPERATURE if t is None else t}

    async def _chunks(self, system_prompt: str, messages: Sequence[Message]) -> AsyncGenerator[StreamChunk, None]:
        model_id = self.describe_model().id
        model = self._client.GenerativeModel(model_id, system_instruction=system_prompt)
        response = await model.generate_content_async(
            [convert_message_to_gemini(m) for m in messages],
            generation_config=self._generation_config(),
            stream=True,
        )
        ctx = LogContext(provider=self.provider_name, model=model_id)
        async for chunk in iter_frames(response, gemini_response_to_chunks, ctx, self._logger):
            yield chunk
        yield gemini_usage_chunk(response)

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        return guard_stream(
            self._chunks(system_prompt, messages),
            label=self.label,
            provider=self.provider_name,
            model=self.describe_model().id,
            logger=self._logger,
        )

    async def complete_once(self, prompt: str) -> str:
        model_id = self.describe_model().id
        model = self._client.GenerativeModel(model_id)
        response = await guard_call(
            model.generate_content_async(
                [{"role": "user", "parts": [{"text": prompt}]}],
                generation_config=self._generation_config(),
            ),
            label=self.label,
            provider=self.provider_name,
            model=model_id,
            logger=self._logger,
        )
        return gemini_response_text(response)


__all__ = ["GeminiAdapter", "GeminiClient"]
