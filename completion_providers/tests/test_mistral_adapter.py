from __future__ import annotations

import json

import httpx
import pytest

from completion_providers.base.chunks import TextChunk, UsageChunk
from completion_providers.base.dto import AdapterConfiguration
from completion_providers.base.errors import ErrorCode, ProviderError
from completion_providers.base.models import Message
from completion_providers.mistral import MistralAdapter


def _sse(*payloads: str) -> bytes:
    return "".join(f"data: {p}\n\n" for p in payloads).encode()


def _client(status=200, body=b"", json_body=None):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if json_body is not None:
            return httpx.Response(status, json=json_body)
        return httpx.Response(status, content=body, headers={"content-type": "text/event-stream"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


def _adapter(client, **cfg):
    return MistralAdapter(AdapterConfiguration(provider="mistral", api_key="m-key", **cfg), client=client)


def test_key_required():
    with pytest.raises(ProviderError) as info:
        MistralAdapter(AdapterConfiguration(provider="mistral"))
    assert info.value.code is ErrorCode.AUTH


async def test_stream_over_sse_skips_bad_frames(log_events):
    body = _sse(
        json.dumps({"choices": [{"delta": {"content": "Hel"}}]}),
        "{broken",
        json.dumps({"choices": [{"delta": {"content": "lo"}}], "usage": {"prompt_tokens": 5, "completion_tokens": 2}}),
        "[DONE]",
    )
    client, seen = _client(body=body)
    chunks = [c async for c in _adapter(client).stream_completion("sys", [Message("user", "hi")])]
    assert chunks == [TextChunk("Hel"), TextChunk("lo"), UsageChunk(input_tokens=5, output_tokens=2)]
    assert len(log_events.named("stream.frame_skipped")) == 1

    (request,) = seen
    assert str(request.url) == "https://codestral.mistral.ai/v1/chat/completions"
    assert request.headers["Authorization"] == "Bearer m-key"
    sent = json.loads(request.content)
    assert sent["model"] == "codestral-latest"
    assert sent["messages"][0] == {"role": "system", "content": "sys"}
    assert sent["stream"] is True
    assert "max_tokens" not in sent
    await client.aclose()


async def test_non_codestral_models_use_api_host():
    client, seen = _client(body=_sse("[DONE]"))
    adapter = _adapter(client, api_model_id="mistral-large-latest", include_max_tokens=True)
    chunks = [c async for c in adapter.stream_completion("sys", [Message("user", "hi")])]
    assert chunks == [UsageChunk()]
    assert str(seen[0].url) == "https://api.mistral.ai/v1/chat/completions"
    assert json.loads(seen[0].content)["max_tokens"] == adapter.describe_model().info.max_tokens
    await client.aclose()


async def test_http_error_is_wrapped():
    client, _ = _client(status=401, json_body={"message": "Unauthorized"})
    with pytest.raises(ProviderError) as info:
        [c async for c in _adapter(client).stream_completion("sys", [Message("user", "hi")])]
    assert info.value.code is ErrorCode.AUTH
    assert info.value.message.startswith("Mistral completion error: ")
    await client.aclose()


async def test_complete_once_reads_message_content():
    client, seen = _client(json_body={"choices": [{"message": {"content": [{"type": "text", "text": "pong"}]}}]})
    assert await _adapter(client).complete_once("ping") == "pong"
    assert "stream" not in json.loads(seen[0].content)
    await client.aclose()


async def test_each_adapter_owns_its_http_client():
    first, second = _adapter(None), _adapter(None)
    client_a, client_b = first._http(), second._http()
    assert client_a is not client_b
    assert first._http() is client_a

    await first.aclose()
    assert client_a.is_closed
    assert not client_b.is_closed
    assert first._http() is not client_a
    await first.aclose()
    await second.aclose()


async def test_injected_client_is_left_open():
    client, _ = _client(body=_sse("[DONE]"))
    adapter = _adapter(client)
    await adapter.aclose()
    assert not client.is_closed
    assert adapter._http() is client
    await client.aclose()
