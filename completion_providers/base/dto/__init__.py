"""DTO package for adapter construction."""

from .adapter_configuration import AdapterConfiguration

__all__ = ["AdapterConfiguration"]
