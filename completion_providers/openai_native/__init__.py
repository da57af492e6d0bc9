"""OpenAI (first-party models) adapter."""

from .client import OpenAINativeAdapter

__all__ = ["OpenAINativeAdapter"]
