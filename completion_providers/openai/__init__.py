"""Generic OpenAI-compatible adapter (OpenAI, Azure OpenAI, custom endpoints)."""

from .client import OpenAIAdapter

__all__ = ["OpenAIAdapter"]
