"""Unified configuration layer for completion adapters.

Goals
-----
* Centralize defaults (models, base URLs).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Optional external config file (JSON or YAML) pointed to by PROVIDERS_CONFIG_FILE
    3. Environment variables (e.g. OPENROUTER_MODEL, BEDROCK_REGION)
    4. Canonical key variables from ``config.env.ENV_MAP`` when no key is set yet
    5. In-code overrides passed to the helper
* Provide a single call site: ``get_provider_config(provider: str)``.

Environment Variable Conventions
--------------------------------
<PREFIX>_MODEL, <PREFIX>_API_KEY, <PREFIX>_BASE_URL, <PREFIX>_REGION,
<PREFIX>_PROJECT_ID where PREFIX is the upper-cased provider id with ``-``
replaced by ``_`` (``OPENAI_NATIVE_MODEL``).

External Config File
--------------------
JSON is tried first, then YAML via PyYAML. Structure example:

```
openrouter:
  model: anthropic/claude-3.5-sonnet:beta
  use_middle_out_transform: true
vertex:
  project_id: my-project
  region: europe-west1
```
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    ANTHROPIC_DEFAULT_MODEL,
    BEDROCK_DEFAULT_MODEL,
    BEDROCK_DEFAULT_REGION,
    DEEPSEEK_DEFAULT_BASE_URL,
    DEEPSEEK_DEFAULT_MODEL,
    GEMINI_DEFAULT_MODEL,
    GLAMA_DEFAULT_MODEL,
    LMSTUDIO_DEFAULT_BASE_URL,
    MISTRAL_DEFAULT_MODEL,
    OLLAMA_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_NATIVE_DEFAULT_MODEL,
    OPENROUTER_DEFAULT_BASE_URL,
    OPENROUTER_DEFAULT_MODEL,
    REQUESTY_DEFAULT_MODEL,
    UNBOUND_DEFAULT_MODEL,
    VERTEX_DEFAULT_MODEL,
    VERTEX_DEFAULT_REGION,
)
from .env import env_prefix, is_placeholder, resolve_provider_key


DEFAULTS: Dict[str, Dict[str, Any]] = {
    "anthropic": {"model": ANTHROPIC_DEFAULT_MODEL},
    "vertex": {"model": VERTEX_DEFAULT_MODEL, "region": VERTEX_DEFAULT_REGION},
    "bedrock": {"model": BEDROCK_DEFAULT_MODEL, "region": BEDROCK_DEFAULT_REGION},
    "openai": {"base_url": OPENAI_DEFAULT_BASE_URL},
    "openai-native": {"model": OPENAI_NATIVE_DEFAULT_MODEL},
    "deepseek": {"model": DEEPSEEK_DEFAULT_MODEL, "base_url": DEEPSEEK_DEFAULT_BASE_URL},
    "gemini": {"model": GEMINI_DEFAULT_MODEL},
    "openrouter": {"model": OPENROUTER_DEFAULT_MODEL, "base_url": OPENROUTER_DEFAULT_BASE_URL},
    "glama": {"model": GLAMA_DEFAULT_MODEL},
    "requesty": {"model": REQUESTY_DEFAULT_MODEL},
    "unbound": {"model": UNBOUND_DEFAULT_MODEL},
    "mistral": {"model": MISTRAL_DEFAULT_MODEL},
    "ollama": {"base_url": OLLAMA_DEFAULT_BASE_URL},
    "lmstudio": {"base_url": LMSTUDIO_DEFAULT_BASE_URL},
}


ENV_FIELD_MAP = {
    "model": "MODEL",
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "base_url": "BASE_URL",
    "region": "REGION",
    "project_id": "PROJECT_ID",
}


_FILE_CACHE: Optional[Dict[str, Any]] = None


def _load_external_config() -> Dict[str, Any]:
    """Load and cache the PROVIDERS_CONFIG_FILE mapping (empty when unset or unreadable)."""
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("PROVIDERS_CONFIG_FILE")
    if not path or not Path(path).is_file():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    data: Any
    try:
        data = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def reset_config_cache() -> None:
    """Forget the cached external config file (tests and hot reload)."""
    global _FILE_CACHE
    _FILE_CACHE = None


def _env_overrides(provider: str) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    prefix = env_prefix(provider)
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None and not is_placeholder(val):
            out[field] = val
    return out


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Merge order (later wins): defaults -> external config -> env vars ->
    canonical key variable (only when no key yet) -> overrides.
    """
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= _env_overrides(name)

    if not cfg.get("api_key"):
        key, _ = resolve_provider_key(name)
        if key:
            cfg["api_key"] = key

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
]
