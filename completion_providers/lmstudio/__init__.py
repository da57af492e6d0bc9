"""LM Studio (local models) adapter."""

from .client import LmStudioAdapter

__all__ = ["LmStudioAdapter"]
