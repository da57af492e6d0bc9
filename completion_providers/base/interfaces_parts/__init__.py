"""Interface Protocols, one class per module."""

from .completion_adapter import CompletionAdapter
from .disposable import Disposable

__all__ = ["CompletionAdapter", "Disposable"]
