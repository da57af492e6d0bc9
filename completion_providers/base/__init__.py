"""
Completion core base package.

Exports the provider-agnostic contracts shared by every adapter:

- Chunks: the canonical stream vocabulary
- Models: canonical messages and model descriptors
- Interfaces: the adapter and disposable protocols
- DTOs: adapter configuration
- Factory: lazy creation of adapters by provider id
"""

from .chunks import ApiStream, ReasoningChunk, StreamChunk, TextChunk, UsageChunk
from .dto import AdapterConfiguration
from .errors import ErrorCode, ProviderError
from .factory import AdapterFactory, UnknownProviderError, build_adapter
from .interfaces import CompletionAdapter, Disposable
from .models import (
    ContentBlock,
    ImageBlock,
    Message,
    ModelDescriptor,
    ModelInfo,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
)
from .utils import single_completion

__all__ = [
    # Chunks
    "ApiStream",
    "StreamChunk",
    "TextChunk",
    "ReasoningChunk",
    "UsageChunk",
    # Models
    "Message",
    "ContentBlock",
    "TextBlock",
    "ImageBlock",
    "ToolUseBlock",
    "ToolResultBlock",
    "ModelInfo",
    "ModelDescriptor",
    # Interfaces
    "CompletionAdapter",
    "Disposable",
    # DTOs
    "AdapterConfiguration",
    # Errors
    "ErrorCode",
    "ProviderError",
    # Factory
    "AdapterFactory",
    "UnknownProviderError",
    "build_adapter",
    "single_completion",
]
