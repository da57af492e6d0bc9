"""Disposable Protocol (single-class module).

Capability marker for adapters that own background work.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Disposable(Protocol):
    """Adapter that must be disposed to stop timers it scheduled."""

    def dispose(self) -> None:  # pragma: no cover - interface
        """Release background work. Calling twice is a no-op."""
        ...
