"""CompletionAdapter Protocol (single-class module).

Defines the contract every backend adapter satisfies.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from ..chunks import ApiStream
from ..models import Message, ModelDescriptor


@runtime_checkable
class CompletionAdapter(Protocol):
    """Streaming completion interface for one backend.

    Implementations translate canonical messages to the backend wire format,
    normalize backend frames into canonical chunks and never leak SDK objects
    upstream. Backend and transport failures are raised as ``ProviderError``.
    """

    @property
    def provider_name(self) -> str:
        """Canonical provider identifier, e.g. ``"openrouter"``."""
        ...

    def stream_completion(self, system_prompt: str, messages: Sequence[Message]) -> ApiStream:
        """Stream text, reasoning and usage chunks for one conversation turn."""
        ...

    async def complete_once(self, prompt: str) -> str:
        """Return the full reply to a single non-conversational prompt."""
        ...

    def describe_model(self) -> ModelDescriptor:
        """Return the resolved model id and info; never fails."""
        ...
