"""Shared plumbing for backends that speak the OpenAI chat-completions API.

OpenAI, Azure, DeepSeek, Requesty, Unbound, OpenRouter, Glama, Ollama and
LM Studio differ only in how they build a request and how they report usage.
Each adapter composes one :class:`OpenAICompatibleStreamer` for the parts
they share: opening the stream, decoding frames, wrapping errors and one-shot
calls.
"""
from __future__ import annotations

import logging
from enum import Enum
from functools import partial
from typing import Any, AsyncGenerator, AsyncIterable, Dict, List, Mapping, Optional, Sequence

from ..formats.openai_format import convert_to_openai_messages, openai_frame_to_chunks, openai_response_text
from ..formats.r1_format import convert_to_r1_format
from ..formats.simple_format import convert_to_simple_messages
from .chunks import ApiStream, StreamChunk
from .logging import LogContext
from .models import Message
from .streaming import FrameConverter, guard_call, guard_stream, iter_frames


class MessageStyle(str, Enum):
    OPENAI = "openai"
    R1 = "r1"
    SIMPLE = "simple"


def build_openai_messages(
    system_prompt: str,
    messages: Sequence[Message],
    *,
    style: MessageStyle = MessageStyle.OPENAI,
    system_role: str = "system",
) -> List[Dict[str, Any]]:
    """Prepend the system prompt and convert the history for ``style``.

    R1 models take no system role: the prompt becomes a leading user turn and
    merges with the first user message.
    """
    if style is MessageStyle.R1:
        return convert_to_r1_format([Message(role="user", content=system_prompt), *messages])
    if style is MessageStyle.SIMPLE:
        body = convert_to_simple_messages(messages)
    else:
        body = convert_to_openai_messages(messages)
    return [{"role": system_role, "content": system_prompt}, *body]


class OpenAICompatibleStreamer:
    """Streams and one-shot calls against an ``openai.AsyncOpenAI``-shaped client."""

    def __init__(
        self,
        client: Any,
        *,
        provider: str,
        label: str,
        model_id: str,
        logger: logging.Logger,
        include_cache_usage: bool = False,
    ) -> None:
        self.client = client
        self.provider = provider
        self.label = label
        self.model_id = model_id
        self.logger = logger
        self.include_cache_usage = include_cache_usage

    @property
    def ctx(self) -> LogContext:
        return LogContext(provider=self.provider, model=self.model_id)

    def default_converter(self) -> FrameConverter:
        return partial(openai_frame_to_chunks, include_cache_usage=self.include_cache_usage)

    def frames(
        self, response: AsyncIterable[Any], convert: Optional[FrameConverter] = None
    ) -> AsyncGenerator[StreamChunk, None]:
        """Decode an already opened response; malformed frames are skipped."""
        return iter_frames(response, convert or self.default_converter(), self.ctx, self.logger)

    async def _open_and_decode(
        self, request: Mapping[str, Any], convert: Optional[FrameConverter]
    ) -> AsyncGenerator[StreamChunk, None]:
        response = await self.client.chat.completions.create(**request, stream=True)
        async for chunk in self.frames(response, convert):
            yield chunk

    def guard(self, source: AsyncGenerator[StreamChunk, None], *, ensure_usage: bool = True) -> ApiStream:
        return guard_stream(
            source,
            label=self.label,
            provider=self.provider,
            model=self.model_id,
            logger=self.logger,
            ensure_usage=ensure_usage,
        )

    def stream(
        self,
        request: Mapping[str, Any],
        *,
        convert: Optional[FrameConverter] = None,
        ensure_usage: bool = True,
    ) -> ApiStream:
        """Open a streaming completion for ``request`` and yield canonical chunks."""
        return self.guard(self._open_and_decode(request, convert), ensure_usage=ensure_usage)

    async def create(self, request: Mapping[str, Any]) -> Any:
        """One non-streaming call returning the raw response, errors wrapped."""
        return await guard_call(
            self.client.chat.completions.create(**request),
            label=self.label,
            provider=self.provider,
            model=self.model_id,
            logger=self.logger,
        )

    async def complete(self, request: Mapping[str, Any]) -> str:
        """One non-streaming call returning the reply text (``""`` when empty)."""
        return openai_response_text(await self.create(request))


__all__ = ["MessageStyle", "build_openai_messages", "OpenAICompatibleStreamer"]
