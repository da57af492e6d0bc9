"""BedrockAdapter.

Streams through the ``bedrock-runtime`` Converse API using ``boto3``. The
boto3 client is synchronous; each blocking call (opening the stream, pulling
the next event) runs in a worker thread so the event loop stays free.

Credentials come from a named profile when ``aws_use_profile`` is set, from
explicit access keys otherwise, and fall back to boto3's default chain.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator, Dict, Iterable, Optional, Sequence

import boto3

from ..base.chunks import ApiStream, StreamChunk
from ..base.dto import AdapterConfiguration
from ..base.logging import LogContext, get_logger
from ..base.model_catalog import BEDROCK_MODELS, resolve_model
from ..base.models import Message, ModelDescriptor
from ..base.streaming import guard_call, guard_stream, iter_frames
from ..config.defaults import (
    BEDROCK_DEFAULT_MODEL,
    BEDROCK_DEFAULT_REGION,
    BEDROCK_DEFAULT_TEMPERATURE,
    BEDROCK_DEFAULT_TOP_P,
    BEDROCK_FALLBACK_MAX_TOKENS,
)
from ..formats._fields import get_field
from ..formats.bedrock_converse_format import bedrock_event_to_chunks, convert_to_bedrock_converse_messages

_DONE = object()

# Region families with a cross-region inference profile.
_CROSS_REGION_PREFIXES = {"us-": "us.", "eu-": "eu."}


def build_session(cfg: AdapterConfiguration) -> "boto3.session.Session":
    if cfg.aws_use_profile and cfg.aws_profile:
        return boto3.session.Session(profile_name=cfg.aws_profile, region_name=cfg.aws_region or BEDROCK_DEFAULT_REGION)
    if cfg.aws_access_key and cfg.aws_secret_key:
        return boto3.session.Session(
            aws_access_key_id=cfg.aws_access_key,
            aws_secret_access_key=cfg.aws_secret_key,
            aws_session_token=cfg.aws_session_token,
            region_name=cfg.aws_region or BEDROCK_DEFAULT_REGION,
        )
    return boto3.session.Session(region_name=cfg.aws_region or BEDROCK_DEFAULT_REGION)


async def _iterate_in_thread(events: Iterable[Any]) -> AsyncGenerator[Any, None]:
    it = iter(events)
    while True:
        event = await asyncio.to_thread(next, it, _DONE)
        if event is _DONE:
            return
        yield event


class BedrockAdapter:
    label = "Bedrock"

    def __init__(self, configuration: Optional[AdapterConfiguration] = None, *, client: Any = None) -> None:
        self.configuration = configuration or AdapterConfiguration.from_settings("bedrock")
        self._client = client or build_session(self.configuration).client("bedrock-runtime")
        self._logger = get_logger("providers.bedrock")

    @property
    def provider_name(self) -> str:
        return "bedrock"

    def describe_model(self) -> ModelDescriptor:
        return resolve_model(BEDROCK_MODELS, self.configuration.api_model_id, BEDROCK_DEFAULT_MODEL)

    def wire_model_id(self) -> str:
        """Model id sent to Bedrock, with the cross-region profile prefix when enabled."""
        model_id = self.describe_model().id
        if not self.configuration.aws_use_cross_region_inference:
            return model_id
        prefix = _CROSS_REGION_PREFIXES.get((self.configuration.aws_region or "")[:3])
        return f"{prefix}{model_id}" if prefix else model_id

    def _inference_config(self) -> Dict[str, Any]:
        info = self.describe_model().info
        t = self.configuration.temperature
        return {
            "maxTokens": info.max_tokens if info.max_tokens and info.max_tokens > 0 else BEDROCK_FALLBACK_MAX_TOKENS,
            "temperature": BEDROCK_DEFAULT_TEMPERATURE if t is None else t,
            "topP": BEDROCK_DEFAULT_TOP_P,
        }

    def build_request(self, system_prompt: str, messages: Sequence[Message]) -> Dict[str, Any]:
        request: Dict[str, Any] = {
            "modelId": self.wire_model_id(),
            "messages": convert_to_bedrock_converse_messages(messages),
            "system": [{"text": system_prompt}],
            "inferenceConfig": self._inference_config(),
        }
        if self.configuration.aws_use_prompt_cache:
            request["additionalModelRequestFields"] = {
                "promptCache": {"promptCacheId": self.configuration.aws_prompt_cache_id or ""}
            }
        return request

    async def _events(self, request: Dict[str, Any]) -> AsyncGenerator[StreamChunk, None]:
        response = await asyncio.to_thread(lambda: self._client.converse_stream(**request))
        stream = response.get("stream")
        if stream is None:
            raise RuntimeError("No stream available in the response")
        ctx = LogContext(provider=self.provider_name, model=request["modelId"])
        frames = iter_frames(_iterate_in_thread(stream), bedrock_event_to_chunks, ctx, self._logger)
        try:
            async for chunk in frames:
                yield chunk
        finally:
            await frames.aclose()
            # botocore EventStream holds the HTTP connection until closed
            close = getattr(stream, "close", None)
            if close is not None:
                await asyncio.to_thread(close)

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        request = self.build_request(system_prompt, messages)
        return guard_stream(
            self._events(request),
            label=self.label,
            provider=self.provider_name,
            model=request["modelId"],
            logger=self._logger,
        )

    async def complete_once(self, prompt: str) -> str:
        request = {
            "modelId": self.wire_model_id(),
            "messages": convert_to_bedrock_converse_messages([Message(role="user", content=prompt)]),
            "inferenceConfig": self._inference_config(),
        }
        response = await guard_call(
            asyncio.to_thread(lambda: self._client.converse(**request)),
            label=self.label,
            provider=self.provider_name,
            model=request["modelId"],
            logger=self._logger,
        )
        content = get_field(response, "output", "message", "content", default=[])
        return get_field(content[0], "text", default="") if content else ""


__all__ = ["BedrockAdapter", "build_session"]
