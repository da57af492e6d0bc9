"""completion_providers package

Provider-agnostic streaming completion core.

Purpose:
    Turn a system prompt plus a canonical conversation into an async stream
    of text, reasoning and usage chunks, whichever backend serves it.

Public API (re-exported):
    - Version: ``__version__``
    - Exceptions: :class:`ProviderError`, :class:`ErrorCode`
    - Factory: :func:`build_adapter`, :class:`AdapterFactory`
    - Helpers: :func:`single_completion`, :func:`configure_logger`
"""

from .base import (
    AdapterConfiguration,
    AdapterFactory,
    CompletionAdapter,
    ErrorCode,
    Message,
    ModelDescriptor,
    ModelInfo,
    ProviderError,
    ReasoningChunk,
    StreamChunk,
    TextChunk,
    UsageChunk,
    build_adapter,
    single_completion,
)
from .base.logging import configure_logger

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ProviderError",
    "ErrorCode",
    "AdapterConfiguration",
    "AdapterFactory",
    "build_adapter",
    "CompletionAdapter",
    "Message",
    "ModelInfo",
    "ModelDescriptor",
    "StreamChunk",
    "TextChunk",
    "ReasoningChunk",
    "UsageChunk",
    "single_completion",
    "configure_logger",
]
