"""Resilience helpers (retry policies)."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry_async

__all__ = ["RetryConfig", "DEFAULT_RETRY_CONFIG", "retry_async"]
