"""Convenience helper for one-shot completions.

Sends a plain text prompt through an adapter's ``complete_once`` without
driving a stream.
"""
from __future__ import annotations

from typing import Any

from ..errors import ErrorCode, ProviderError


async def single_completion(adapter: Any, prompt: str) -> str:
    """Return the adapter's one-shot reply to ``prompt``.

    Raises
    - ProviderError: ``UNSUPPORTED`` when the adapter has no ``complete_once``;
      otherwise whatever the adapter raises.
    """
    complete_once = getattr(adapter, "complete_once", None)
    if not callable(complete_once):
        provider = getattr(adapter, "provider_name", None) or type(adapter).__name__
        raise ProviderError(
            code=ErrorCode.UNSUPPORTED,
            message=f"{provider} does not support single completions",
            provider=str(provider),
        )
    return await complete_once(prompt)


__all__ = ["single_completion"]
