"""
Structured provider error exception type.

Every backend or transport failure that leaves an adapter is raised as a
`ProviderError`. The human-readable ``message`` is provider-tagged
(``"<Provider> completion error: <cause>"``) while ``code`` carries the
normalized classification used for retry decisions and structured logging.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured provider error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable, provider-tagged error message.
        provider: Provider key where the error originated (e.g., ``"openai"``).
        model: Optional model name associated with the failure.
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return the provider-tagged message."""
        return self.message


__all__ = ["ProviderError"]
