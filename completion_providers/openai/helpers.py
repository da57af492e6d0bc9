"""Endpoint and model-family detection for the generic OpenAI adapter."""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlparse


def url_host(base_url: Optional[str]) -> str:
    """Host of ``base_url``; ``""`` for a missing or unparseable URL."""
    if not base_url:
        return ""
    try:
        return urlparse(base_url).hostname or ""
    except ValueError:
        return ""


def is_azure(base_url: Optional[str], use_azure: bool = False) -> bool:
    host = url_host(base_url)
    return use_azure or host == "azure.com" or host.endswith(".azure.com")


def is_deepseek_reasoner(model_id: str) -> bool:
    return "deepseek-reasoner" in (model_id or "")


def is_ark_endpoint(base_url: Optional[str]) -> bool:
    """Volcengine Ark endpoints accept plain string content only."""
    return ".volces.com" in (base_url or "")


__all__ = ["url_host", "is_azure", "is_deepseek_reasoner", "is_ark_endpoint"]
