"""Unbound gateway adapter."""

from .client import UnboundAdapter

__all__ = ["UnboundAdapter"]
