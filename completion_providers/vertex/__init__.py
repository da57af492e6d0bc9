"""Claude on Google Vertex AI adapter."""

from .client import VertexAdapter

__all__ = ["VertexAdapter"]
