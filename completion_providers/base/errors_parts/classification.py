"""Map SDK and transport exceptions onto :class:`ErrorCode`.

``anthropic``, ``openai``, ``botocore``, ``google.api_core`` and raw
``httpx`` failures all collapse to one taxonomy: timeouts first, then
transport failures, then the HTTP status wherever the exception keeps it,
then a keyword scan of the message. :func:`wrap_completion_error` builds the
provider-tagged :class:`ProviderError` every adapter raises.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional, Tuple

import httpx

from .error_code import RETRYABLE_CODES, ErrorCode
from .provider_error import ProviderError


def _valid_status(value: Any) -> Optional[int]:
    return value if isinstance(value, int) and 100 <= value < 600 else None


def _extract_status(exc: BaseException) -> Optional[int]:
    """HTTP status from ``status_code``/``status``, the response object, or botocore metadata."""
    for attr in ("status_code", "status"):
        status = _valid_status(getattr(exc, attr, None))
        if status is not None:
            return status
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        return _valid_status(response.get("ResponseMetadata", {}).get("HTTPStatusCode"))
    return _valid_status(getattr(response, "status_code", None))


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

# first match wins; "rate limit" needs both words anywhere in the message
_MESSAGE_KEYWORDS: Tuple[Tuple[ErrorCode, Tuple[str, ...]], ...] = (
    (ErrorCode.TIMEOUT, ("timeout", "timed out")),
    (ErrorCode.AUTH, ("auth", "api key", "unauthorized", "forbidden")),
    (ErrorCode.UNSUPPORTED, ("unsupported", "not supported")),
    (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
    (ErrorCode.CONFLICT, ("conflict",)),
    (ErrorCode.UNAVAILABLE, ("unavailable", "overloaded")),
    (ErrorCode.VALIDATION, ("validation", "invalid", "malformed")),
    (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
    (ErrorCode.TRANSIENT, ("connection",)),
)


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    for code, keywords in _MESSAGE_KEYWORDS:
        if any(keyword in msg for keyword in keywords):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify ``exc``; a :class:`ProviderError` keeps its own code."""
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return ErrorCode.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.TRANSIENT
    status = _extract_status(exc)
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    return _heuristic_from_message(str(exc).lower()) or ErrorCode.UNKNOWN


def completion_error_prefix(label: str) -> str:
    """Return the message prefix used for ``label`` (e.g. ``"Anthropic"``)."""
    return f"{label} completion error: "


def wrap_completion_error(
    exc: BaseException,
    *,
    label: str,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Wrap ``exc`` into a provider-tagged :class:`ProviderError`.

    Summary:
        Produces ``"<label> completion error: <cause>"``. Wrapping is
        idempotent: an error already carrying this adapter's prefix is
        returned unchanged so nested guards never stack prefixes.

    Parameters:
        exc: The original exception raised by the SDK, transport or adapter.
        label: Human-facing provider label used in the message.
        provider: Canonical provider slug recorded on the error.
        model: Optional model id associated with the failing request.

    Returns:
        ProviderError: The normalized error, with ``raw`` set to the cause.
    """
    prefix = completion_error_prefix(label)
    if isinstance(exc, ProviderError):
        if exc.message.startswith(prefix):
            return exc
        cause = exc.message
        raw = exc.raw or exc
    else:
        cause = str(exc) or exc.__class__.__name__
        raw = exc
    code = classify_exception(exc)
    return ProviderError(
        code=code,
        message=f"{prefix}{cause}",
        provider=provider,
        model=model,
        retryable=code in RETRYABLE_CODES,
        raw=raw,
    )


__all__ = [
    "classify_exception",
    "completion_error_prefix",
    "wrap_completion_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
