"""Mistral chat completions adapter."""

from .client import MistralAdapter

__all__ = ["MistralAdapter"]
