from __future__ import annotations

import logging

import pytest

from completion_providers.anthropic import AnthropicAdapter
from completion_providers.base.dto import AdapterConfiguration
from completion_providers.base.errors import ErrorCode, ProviderError
from completion_providers.base.factory import AdapterFactory, UnknownProviderError, build_adapter
from completion_providers.base.interfaces import CompletionAdapter, Disposable
from completion_providers.base.utils import single_completion
from completion_providers.openai import OpenAIAdapter
from completion_providers.tests.fakes import FakeAnthropicClient, FakeOpenAIClient, openai_response
from completion_providers.vertex import VertexAdapter


def test_supported_providers():
    assert AdapterFactory.supported() == (
        "anthropic",
        "vertex",
        "bedrock",
        "openai",
        "openai-native",
        "deepseek",
        "requesty",
        "unbound",
        "openrouter",
        "glama",
        "gemini",
        "mistral",
        "ollama",
        "lmstudio",
    )


def test_builds_requested_adapter():
    adapter = build_adapter("OpenAI", AdapterConfiguration(provider="openai", api_model_id="gpt-4o"), client=FakeOpenAIClient())
    assert isinstance(adapter, OpenAIAdapter)
    assert isinstance(adapter, CompletionAdapter)
    assert adapter.provider_name == "openai"


def test_unknown_provider_falls_back_with_warning(log_events):
    adapter = build_adapter("bogus", AdapterConfiguration(provider="anthropic", api_key="k"), client=FakeAnthropicClient())
    assert isinstance(adapter, AnthropicAdapter)
    (event,) = log_events.named("factory.fallback")
    assert event["requested"] == "bogus"
    assert event["provider"] == "anthropic"
    assert event["_level"] == logging.WARNING


def test_unloadable_module_raises(monkeypatch):
    monkeypatch.setitem(AdapterFactory._ADAPTERS, "ollama", {"module": "completion_providers.missing", "class": "X"})
    with pytest.raises(UnknownProviderError):
        AdapterFactory.create("ollama")


def test_missing_class_raises(monkeypatch):
    monkeypatch.setitem(
        AdapterFactory._ADAPTERS, "ollama", {"module": "completion_providers.ollama.client", "class": "Nope"}
    )
    with pytest.raises(UnknownProviderError):
        AdapterFactory.create("ollama")


def test_constructor_errors_propagate():
    with pytest.raises(ProviderError) as info:
        build_adapter("requesty", AdapterConfiguration(provider="requesty"), client=FakeOpenAIClient())
    assert info.value.code is ErrorCode.AUTH


def test_only_cache_owning_adapters_are_disposable():
    vertex = VertexAdapter(AdapterConfiguration(provider="vertex", vertex_project_id="p"), client=FakeAnthropicClient())
    anthropic = AnthropicAdapter(AdapterConfiguration(provider="anthropic", api_key="k"), client=FakeAnthropicClient())
    assert isinstance(vertex, Disposable)
    assert not isinstance(anthropic, Disposable)


async def test_single_completion_delegates():
    client = FakeOpenAIClient(response=openai_response("pong"))
    adapter = OpenAIAdapter(AdapterConfiguration(provider="openai", api_model_id="gpt-4o"), client=client)
    assert await single_completion(adapter, "ping") == "pong"


async def test_single_completion_unsupported():
    class StreamOnly:
        provider_name = "stream-only"

    with pytest.raises(ProviderError) as info:
        await single_completion(StreamOnly(), "ping")
    assert info.value.code is ErrorCode.UNSUPPORTED
    assert info.value.message == "stream-only does not support single completions"
