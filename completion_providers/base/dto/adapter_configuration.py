"""Typed, immutable configuration for completion adapter initialization.

Purpose
-------
Capture everything an adapter needs at construction time (credentials,
endpoint, model selection, sampling and provider-specific flags) in one
frozen object. The configuration is built once per chat session and never
changes for the adapter's lifetime.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` with ``frozen=True`` for validation and
  immutability.

Notes
-----
- Unknown keys from the layered config are kept in ``extra`` so provider
  specific fields can travel without widening the model.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...config import get_provider_config
from ..models import ModelInfo

# Keys of ``get_provider_config`` output that map onto a differently named field.
_RENAMED_KEYS = {
    "model": "api_model_id",
    "project_id": "vertex_project_id",
}


class AdapterConfiguration(BaseModel):
    """Adapter initialization parameters.

    Attributes
    ----------
    provider:
        Canonical provider slug (``"anthropic"``, ``"openrouter"``...).
    api_model_id:
        Requested model id. Unknown ids resolve to the provider default.
    custom_model_info:
        Limits and prices for gateway or self-hosted models whose ids are not
        in a fixed table.
    temperature:
        Overrides the model-family default when set.
    include_max_tokens:
        Send ``max_tokens`` on OpenAI-compatible requests.
    streaming_enabled:
        ``False`` makes the generic OpenAI adapter issue one non-streaming call.
    vertex_context:
        Optional context text injected as a cached second system block.
    extra:
        Free-form provider-specific bag.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    provider: Optional[str] = None
    api_model_id: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    temperature: Optional[float] = None
    include_max_tokens: bool = False
    streaming_enabled: bool = True
    custom_model_info: Optional[ModelInfo] = None

    # OpenAI / Azure
    use_azure: bool = False
    azure_api_version: Optional[str] = None

    # AWS Bedrock
    aws_access_key: Optional[str] = None
    aws_secret_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    aws_region: Optional[str] = None
    aws_profile: Optional[str] = None
    aws_use_profile: bool = False
    aws_use_cross_region_inference: bool = False
    aws_use_prompt_cache: bool = False
    aws_prompt_cache_id: Optional[str] = None

    # Vertex
    vertex_project_id: Optional[str] = None
    vertex_region: Optional[str] = None
    vertex_context: Optional[str] = None

    # Mistral / OpenRouter
    codestral_url: Optional[str] = None
    use_middle_out_transform: bool = False

    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, provider: str, **overrides: Any) -> "AdapterConfiguration":
        """Build a configuration from the layered provider config.

        ``region`` lands on ``aws_region`` for bedrock and ``vertex_region``
        otherwise. Keys that match no field are collected into ``extra``.
        """
        name = (provider or "").lower().strip()
        merged = get_provider_config(name, overrides)
        data: Dict[str, Any] = {"provider": name}
        extra: Dict[str, Any] = dict(merged.pop("extra", None) or {})
        for key, value in merged.items():
            if key == "region":
                key = "aws_region" if name == "bedrock" else "vertex_region"
            key = _RENAMED_KEYS.get(key, key)
            if key in cls.model_fields:
                data[key] = value
            else:
                extra[key] = value
        data["extra"] = extra
        return cls(**data)


__all__ = ["AdapterConfiguration"]
