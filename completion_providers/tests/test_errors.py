from __future__ import annotations

import asyncio

import httpx
import pytest

from completion_providers.base.errors import (
    RETRYABLE_CODES,
    ErrorCode,
    ProviderError,
    classify_exception,
    wrap_completion_error,
)
from completion_providers.tests.fakes import StatusError


@pytest.mark.parametrize(
    "status,code",
    [
        (400, ErrorCode.VALIDATION),
        (401, ErrorCode.AUTH),
        (403, ErrorCode.AUTH),
        (404, ErrorCode.NOT_FOUND),
        (429, ErrorCode.RATE_LIMIT),
        (500, ErrorCode.SERVER_ERROR),
        (502, ErrorCode.TRANSIENT),
        (503, ErrorCode.UNAVAILABLE),
        (504, ErrorCode.TIMEOUT),
    ],
)
def test_status_mapping(status, code):
    assert classify_exception(StatusError(status)) is code


def test_botocore_shaped_response_status():
    exc = Exception("throttled")
    exc.response = {"ResponseMetadata": {"HTTPStatusCode": 429}}
    assert classify_exception(exc) is ErrorCode.RATE_LIMIT


def test_timeouts_and_transport_errors():
    assert classify_exception(asyncio.TimeoutError()) is ErrorCode.TIMEOUT
    assert classify_exception(httpx.ReadTimeout("slow")) is ErrorCode.TIMEOUT
    assert classify_exception(httpx.ConnectError("refused")) is ErrorCode.TRANSIENT


def test_message_heuristics_and_fallback():
    assert classify_exception(RuntimeError("Invalid API key")) is ErrorCode.AUTH
    assert classify_exception(RuntimeError("model does not exist")) is ErrorCode.NOT_FOUND
    assert classify_exception(RuntimeError("server overloaded")) is ErrorCode.UNAVAILABLE
    assert classify_exception(RuntimeError("something odd")) is ErrorCode.UNKNOWN


def test_wrap_builds_prefixed_error():
    cause = StatusError(503, "try later")
    err = wrap_completion_error(cause, label="OpenAI", provider="openai", model="gpt-4o")
    assert err.message == "OpenAI completion error: try later"
    assert err.code is ErrorCode.UNAVAILABLE
    assert err.retryable is (ErrorCode.UNAVAILABLE in RETRYABLE_CODES)
    assert err.raw is cause
    assert err.model == "gpt-4o"


def test_wrap_uses_class_name_for_empty_message():
    err = wrap_completion_error(ValueError(), label="X", provider="x")
    assert err.message == "X completion error: ValueError"


def test_wrap_rewraps_foreign_provider_error():
    inner = ProviderError(code=ErrorCode.AUTH, message="Mistral API key is required", provider="mistral")
    err = wrap_completion_error(inner, label="Mistral", provider="mistral")
    assert err.message == "Mistral completion error: Mistral API key is required"
    assert err.code is ErrorCode.AUTH
    assert wrap_completion_error(err, label="Mistral", provider="mistral") is err
