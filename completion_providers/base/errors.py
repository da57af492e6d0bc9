"""Unified provider error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``completion_providers.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import RETRYABLE_CODES, ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import (
    classify_exception,
    completion_error_prefix,
    wrap_completion_error,
)

__all__ = [
    "ErrorCode",
    "RETRYABLE_CODES",
    "ProviderError",
    "classify_exception",
    "completion_error_prefix",
    "wrap_completion_error",
]
