"""GeminiAdapter against a stand-in for the ``google.generativeai`` module.

The fake exposes ``GenerativeModel`` only, which is all the adapter uses
once constructed with an explicit client.
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from completion_providers.base.chunks import TextChunk, UsageChunk
from completion_providers.base.dto import AdapterConfiguration
from completion_providers.base.errors import ErrorCode, ProviderError
from completion_providers.base.models import Message
from completion_providers.gemini import GeminiAdapter
from completion_providers.gemini import client as gemini_client
from completion_providers.gemini.client import GeminiClient
from completion_providers.tests.fakes import StatusError, collect


def _partial(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class _FakeStreamResponse:
    """Async-iterable partial responses; usage is readable after iteration."""

    def __init__(self, partials: List[Any]) -> None:
        self._partials = partials
        self.usage_metadata = SimpleNamespace(prompt_token_count=6, candidates_token_count=2)

    async def __aiter__(self):
        for partial in self._partials:
            yield partial


class _FakeGenerativeModel:
    def __init__(self, sdk: "_FakeGenai", model_name: str, system_instruction: Any = None) -> None:
        self._sdk = sdk
        sdk.models.append({"model_name": model_name, "system_instruction": system_instruction})

    async def generate_content_async(self, contents, generation_config=None, stream=False):
        self._sdk.requests.append({"contents": contents, "generation_config": generation_config, "stream": stream})
        if self._sdk.error is not None:
            raise self._sdk.error
        if stream:
            return _FakeStreamResponse(self._sdk.partials)
        return _partial("pong")


class _FakeGenai:
    def __init__(self, partials=(), error=None) -> None:
        self.partials = list(partials)
        self.error = error
        self.models: List[Dict[str, Any]] = []
        self.requests: List[Dict[str, Any]] = []

    def GenerativeModel(self, model_name, system_instruction=None):  # noqa: N802 - SDK name
        return _FakeGenerativeModel(self, model_name, system_instruction)


def _adapter(sdk, **cfg):
    return GeminiAdapter(AdapterConfiguration(provider="gemini", api_key="g", **cfg), client=sdk)


async def test_stream_text_then_usage():
    sdk = _FakeGenai([_partial("al"), _partial("pha")])
    chunks = await collect(_adapter(sdk).stream_completion("be brief", [Message("assistant", "x"), Message("user", "hi")]))
    assert chunks == [TextChunk("al"), TextChunk("pha"), UsageChunk(input_tokens=6, output_tokens=2)]
    assert sdk.models[0] == {"model_name": "gemini-2.0-flash-001", "system_instruction": "be brief"}
    request = sdk.requests[0]
    assert request["stream"] is True
    assert request["generation_config"] == {"temperature": 0.0}
    assert [c["role"] for c in request["contents"]] == ["model", "user"]


async def test_errors_are_wrapped():
    sdk = _FakeGenai(error=StatusError(429, "quota"))
    with pytest.raises(ProviderError) as info:
        await collect(_adapter(sdk).stream_completion("s", [Message("user", "hi")]))
    assert info.value.message == "Gemini completion error: quota"
    assert info.value.code is ErrorCode.RATE_LIMIT


async def test_complete_once():
    sdk = _FakeGenai()
    adapter = _adapter(sdk, api_model_id="gemini-2.0-flash-thinking-exp-1219", temperature=0.5)
    assert await adapter.complete_once("ping") == "pong"
    assert sdk.models[0]["model_name"] == "gemini-2.0-flash-thinking-exp-1219"
    assert sdk.requests[0]["contents"] == [{"role": "user", "parts": [{"text": "ping"}]}]
    assert sdk.requests[0]["generation_config"] == {"temperature": 0.5}


class _RecordingService:
    def __init__(self, client_options=None) -> None:
        self.api_key = client_options.api_key


def test_each_adapter_keeps_its_own_key(monkeypatch):
    def no_global_configure(**_kwargs):
        raise AssertionError("genai.configure is process-global")

    monkeypatch.setattr(gemini_client.genai, "configure", no_global_configure)
    monkeypatch.setattr(gemini_client.glm, "GenerativeServiceAsyncClient", _RecordingService)
    first = GeminiAdapter(AdapterConfiguration(provider="gemini", api_key="key-A"))
    second = GeminiAdapter(AdapterConfiguration(provider="gemini", api_key="key-B"))

    model_a = first._client.GenerativeModel("gemini-2.0-flash-001")
    model_b = second._client.GenerativeModel("gemini-2.0-flash-001", system_instruction="sys")
    assert isinstance(first._client, GeminiClient)
    assert model_a._async_client.api_key == "key-A"
    assert model_b._async_client.api_key == "key-B"
    assert first._client.GenerativeModel("gemini-1.5-pro-002")._async_client is model_a._async_client
