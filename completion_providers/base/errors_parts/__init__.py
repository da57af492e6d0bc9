"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `completion_providers.base.errors` for the stable surface.
"""

from .error_code import RETRYABLE_CODES, ErrorCode
from .provider_error import ProviderError
from .classification import classify_exception, completion_error_prefix, wrap_completion_error

__all__ = [
    "ErrorCode",
    "RETRYABLE_CODES",
    "ProviderError",
    "classify_exception",
    "completion_error_prefix",
    "wrap_completion_error",
]
