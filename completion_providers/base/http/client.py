"""Async HTTP clients for adapters that speak raw HTTP.

Purpose:
    Out-of-band usage lookups reuse pooled ``httpx.AsyncClient`` instances
    instead of allocating a client per call. Adapters that stream over raw
    HTTP own a private client built by :func:`new_async_client`.

External dependencies:
    - ``httpx`` for the underlying async HTTP client.

Lifecycle & cleanup:
    - An ``httpx.AsyncClient`` is bound to the event loop it first runs on,
      so the pool is partitioned per running loop and then cached by
      ``(base_url, purpose)``. A loop's clients are forgotten with the loop.
    - :func:`aclose_all_clients` closes and forgets the clients of the
      calling loop; applications call it on shutdown and tests in teardown.
"""

from __future__ import annotations

import asyncio
import threading
import weakref
from typing import Dict, Optional, Tuple

import httpx

from ...config.defaults import HTTP_CONNECT_TIMEOUT_SECONDS

_PoolKey = Tuple[Optional[str], str]
_POOLS: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[_PoolKey, httpx.AsyncClient]]" = (
    weakref.WeakKeyDictionary()
)
_LOCK = threading.RLock()


def new_async_client(base_url: Optional[str] = None) -> httpx.AsyncClient:
    """Build an unpooled client with the shared timeout policy.

    The connect phase is bounded by ``HTTP_CONNECT_TIMEOUT_SECONDS``; reads are
    unbounded because a completion stream may legitimately idle. Callers set
    per-request timeouts where they need them.
    """
    timeout = httpx.Timeout(None, connect=HTTP_CONNECT_TIMEOUT_SECONDS)
    if base_url:
        return httpx.AsyncClient(base_url=base_url, timeout=timeout)
    return httpx.AsyncClient(timeout=timeout)


def get_async_client(base_url: Optional[str], purpose: str) -> httpx.AsyncClient:
    """Return the running loop's pooled client for ``base_url`` and ``purpose``.

    Must be called from a coroutine.
    """
    loop = asyncio.get_running_loop()
    key = (base_url, purpose)
    with _LOCK:
        pool = _POOLS.setdefault(loop, {})
        client = pool.get(key)
        if client is None or client.is_closed:
            client = pool[key] = new_async_client(base_url)
        return client


async def aclose_all_clients() -> None:
    """Close and clear the pooled clients of the running loop."""
    with _LOCK:
        pool = _POOLS.pop(asyncio.get_running_loop(), {})
    for client in pool.values():
        await client.aclose()


__all__ = ["new_async_client", "get_async_client", "aclose_all_clients"]
