"""Ollama (local models) adapter."""

from .client import OllamaAdapter

__all__ = ["OllamaAdapter"]
