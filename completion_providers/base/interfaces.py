"""
Provider-agnostic interfaces (Protocols) for the completion core.

Re-exports Protocols split into single-class modules under
``completion_providers.base.interfaces_parts`` to keep imports stable.
"""

from __future__ import annotations

from .interfaces_parts import CompletionAdapter, Disposable

__all__ = ["CompletionAdapter", "Disposable"]
