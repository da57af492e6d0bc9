"""AnthropicAdapter against a scripted ``messages.create`` client."""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from completion_providers.anthropic import AnthropicAdapter
from completion_providers.base.chunks import TextChunk, UsageChunk
from completion_providers.base.dto import AdapterConfiguration
from completion_providers.base.errors import ErrorCode, ProviderError
from completion_providers.base.models import Message
from completion_providers.config.defaults import ANTHROPIC_PROMPT_CACHING_BETA
from completion_providers.tests.fakes import FakeAnthropicClient, StatusError, anthropic_events, collect


def _adapter(client, **cfg):
    return AnthropicAdapter(AdapterConfiguration(provider="anthropic", api_key="k", **cfg), client=client)


async def test_stream_yields_text_and_cumulative_usage():
    client = FakeAnthropicClient(anthropic_events("Hel", "lo", input_tokens=10, output_tokens=5, cache_write=7, cache_read=3))
    chunks = await collect(_adapter(client).stream_completion("sys", [Message("user", "hi")]))
    assert chunks == [
        UsageChunk(input_tokens=10, output_tokens=1, cache_write_tokens=7, cache_read_tokens=3),
        TextChunk("Hel"),
        TextChunk("\n"),
        TextChunk("lo"),
        UsageChunk(input_tokens=10, output_tokens=5, cache_write_tokens=7, cache_read_tokens=3),
    ]


async def test_request_carries_cache_markers_and_beta_header():
    client = FakeAnthropicClient(anthropic_events("ok"))
    adapter = _adapter(client, api_model_id="claude-3-opus-20240229", temperature=0.4)
    await collect(adapter.stream_completion("sys", [Message("user", "a"), Message("assistant", "b"), Message("user", "c")]))
    (call,) = client.calls
    assert call["model"] == "claude-3-opus-20240229"
    assert call["max_tokens"] == 8192
    assert call["temperature"] == 0.4
    assert call["stream"] is True
    assert call["extra_headers"] == {"anthropic-beta": ANTHROPIC_PROMPT_CACHING_BETA}
    assert call["system"][0]["cache_control"] == {"type": "ephemeral"}
    assert call["messages"][0]["content"][0]["cache_control"] == {"type": "ephemeral"}
    assert call["messages"][1]["content"] == "b"


def test_unknown_model_falls_back_to_default():
    model = _adapter(FakeAnthropicClient(), api_model_id="claude-9").describe_model()
    assert model.id == "claude-3-5-sonnet-20241022"
    assert model.info.input_price == 3.0


async def test_backend_failure_is_wrapped():
    client = FakeAnthropicClient(error=StatusError(529, "Overloaded"))
    with pytest.raises(ProviderError) as info:
        await collect(_adapter(client).stream_completion("sys", [Message("user", "hi")]))
    assert info.value.message == "Anthropic completion error: Overloaded"
    assert info.value.code is ErrorCode.UNAVAILABLE
    assert info.value.provider == "anthropic"


async def test_complete_once_returns_first_text_block():
    response = SimpleNamespace(content=[SimpleNamespace(type="text", text="pong")])
    client = FakeAnthropicClient(response=response)
    assert await _adapter(client).complete_once("ping") == "pong"
    assert client.calls[0]["stream"] is False
    assert client.calls[0]["messages"] == [{"role": "user", "content": "ping"}]


async def test_complete_once_empty_content():
    client = FakeAnthropicClient(response=SimpleNamespace(content=[]))
    assert await _adapter(client).complete_once("ping") == ""
