"""Credential environment variables per provider.

``ENV_MAP`` names the canonical key variable of each keyed provider;
``ENV_ALIASES`` adds accepted alternatives, canonical first. Providers that
authenticate another way (bedrock, vertex, ollama, lmstudio) are absent.
"""
from __future__ import annotations

import os
from typing import Dict, Iterator, Optional, Tuple

ENV_MAP: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "openai-native": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "glama": "GLAMA_API_KEY",
    "requesty": "REQUESTY_API_KEY",
    "unbound": "UNBOUND_API_KEY",
    "mistral": "MISTRAL_API_KEY",
}

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}

_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "example")


def env_prefix(provider: str) -> str:
    """``openai-native`` -> ``OPENAI_NATIVE``."""
    return (provider or "").strip().upper().replace("-", "_")


def is_placeholder(value: Optional[str]) -> bool:
    """True for sample values copied from templates (``test_...``, ``changeme``)."""
    if value is None:
        return False
    lowered = str(value).strip().lower()
    return lowered.startswith("test_") or any(marker in lowered for marker in _PLACEHOLDER_MARKERS)


def get_env_var_candidates(provider: str) -> Iterator[str]:
    slug = (provider or "").lower()
    seen = set()
    for name in (ENV_MAP.get(slug), *ENV_ALIASES.get(slug, ())):
        if name and name not in seen:
            seen.add(name)
            yield name


def resolve_provider_key(provider: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable)`` of the first usable key, else ``(None, None)``."""
    for name in get_env_var_candidates(provider):
        value = os.environ.get(name)
        if value and not is_placeholder(value):
            return value, name
    return None, None


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "env_prefix",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
]
