"""Adapter factory.

Purpose
-------
Select and construct a completion adapter from a provider id. Adapter
modules are imported lazily with ``importlib`` so that building one adapter
never imports the SDKs of the others.

Fallback semantics
------------------
An unknown provider id falls back to ``DEFAULT_PROVIDER`` (``anthropic``) and
logs ``factory.fallback`` at WARNING. A known id whose module or class cannot
be loaded raises :class:`UnknownProviderError`; constructor errors (such as a
missing required API key) propagate unchanged.
"""

from __future__ import annotations

import logging
from importlib import import_module
from typing import Any, Dict, Optional, Tuple, Type

from ..config.defaults import DEFAULT_PROVIDER
from .dto import AdapterConfiguration
from .logging import LogContext, get_logger, log_event

_logger = get_logger("providers.factory")


class UnknownProviderError(Exception):
    """Raised when a registered adapter module or class cannot be loaded."""


class AdapterFactory:
    """Create adapters by canonical provider id (e.g. ``"openrouter"``)."""

    # Canonical provider ids mapped to import path and class name
    _ADAPTERS: Dict[str, Dict[str, str]] = {
        "anthropic": {"module": "completion_providers.anthropic.client", "class": "AnthropicAdapter"},
        "vertex": {"module": "completion_providers.vertex.client", "class": "VertexAdapter"},
        "bedrock": {"module": "completion_providers.bedrock.client", "class": "BedrockAdapter"},
        "openai": {"module": "completion_providers.openai.client", "class": "OpenAIAdapter"},
        "openai-native": {"module": "completion_providers.openai_native.client", "class": "OpenAINativeAdapter"},
        "deepseek": {"module": "completion_providers.deepseek.client", "class": "DeepSeekAdapter"},
        "requesty": {"module": "completion_providers.requesty.client", "class": "RequestyAdapter"},
        "unbound": {"module": "completion_providers.unbound.client", "class": "UnboundAdapter"},
        "openrouter": {"module": "completion_providers.openrouter.client", "class": "OpenRouterAdapter"},
        "glama": {"module": "completion_providers.glama.client", "class": "GlamaAdapter"},
        "gemini": {"module": "completion_providers.gemini.client", "class": "GeminiAdapter"},
        "mistral": {"module": "completion_providers.mistral.client", "class": "MistralAdapter"},
        "ollama": {"module": "completion_providers.ollama.client", "class": "OllamaAdapter"},
        "lmstudio": {"module": "completion_providers.lmstudio.client", "class": "LmStudioAdapter"},
    }

    @classmethod
    def resolve(cls, provider: Optional[str]) -> str:
        """Return the canonical id to build for ``provider``, applying the fallback."""
        name = (provider or "").lower().strip()
        if name in cls._ADAPTERS:
            return name
        log_event(
            _logger,
            "factory.fallback",
            LogContext(provider=DEFAULT_PROVIDER),
            level=logging.WARNING,
            requested=provider,
        )
        return DEFAULT_PROVIDER

    @classmethod
    def adapter_class(cls, provider: str) -> Type:
        entry = cls._ADAPTERS[provider]
        module_path, class_name = entry["module"], entry["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc
        try:
            return getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                f"Adapter class '{class_name}' not found in '{module_path}' for provider '{provider}'"
            ) from exc

    @classmethod
    def create(
        cls,
        provider: Optional[str],
        configuration: Optional[AdapterConfiguration] = None,
        **kwargs: Any,
    ) -> Any:
        """Build the adapter for ``provider``.

        Parameters
        ----------
        provider:
            Canonical provider id; unknown ids fall back to ``anthropic``.
        configuration:
            Adapter configuration. When omitted the adapter loads its own
            settings through ``AdapterConfiguration.from_settings``.
        **kwargs:
            Forwarded to the adapter constructor (e.g. an injected ``client``).
        """
        name = cls.resolve(provider)
        klass = cls.adapter_class(name)
        return klass(configuration, **kwargs)

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Canonical provider ids in registration order."""
        return tuple(cls._ADAPTERS.keys())


def build_adapter(
    provider_id: Optional[str], configuration: Optional[AdapterConfiguration] = None, **kwargs: Any
) -> Any:
    """Shorthand for :meth:`AdapterFactory.create`."""
    return AdapterFactory.create(provider_id, configuration, **kwargs)


__all__ = ["AdapterFactory", "UnknownProviderError", "build_adapter"]
