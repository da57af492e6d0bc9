"""Anthropic Messages API adapter."""

from .client import AnthropicAdapter

__all__ = ["AnthropicAdapter"]
