"""Async HTTP clients: a per-loop pool plus unpooled clients for adapters."""

from .client import aclose_all_clients, get_async_client, new_async_client

__all__ = ["get_async_client", "new_async_client", "aclose_all_clients"]
