"""Requesty router adapter."""

from .client import RequestyAdapter

__all__ = ["RequestyAdapter"]
