"""Glama gateway adapter."""

from .client import GlamaAdapter

__all__ = ["GlamaAdapter"]
