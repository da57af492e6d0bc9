"""Google Gemini adapter."""

from .client import GeminiAdapter

__all__ = ["GeminiAdapter"]
