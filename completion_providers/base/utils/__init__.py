"""Small convenience helpers on top of the adapter contract."""

from .simple import single_completion

__all__ = ["single_completion"]
