"""Offline stand-ins for backend SDK clients used across the adapter tests.

The fakes record every call and replay scripted frames, so adapter behavior
is asserted without network access.
"""
from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, Callable, Dict, Iterable, List, Optional


class FakeAsyncStream:
    """Async iterator over scripted frames; an exception in the script is raised in place."""

    def __init__(self, frames: Iterable[Any]) -> None:
        self._frames = list(frames)
        self.closed = False
        self.consumed = 0

    def __aiter__(self) -> "FakeAsyncStream":
        return self

    async def __anext__(self) -> Any:
        if not self._frames:
            raise StopAsyncIteration
        frame = self._frames.pop(0)
        self.consumed += 1
        if isinstance(frame, BaseException):
            raise frame
        return frame

    async def aclose(self) -> None:
        self.closed = True


class _Endpoint:
    """Records keyword calls and answers with a scripted response or error."""

    def __init__(self, respond: Callable[[Dict[str, Any]], Any]) -> None:
        self.calls: List[Dict[str, Any]] = []
        self._respond = respond

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        result = self._respond(kwargs)
        if isinstance(result, BaseException):
            raise result
        return result


def _scripted(stream_frames: Iterable[Any] = (), response: Any = None, error: Optional[BaseException] = None):
    frames = list(stream_frames)

    def _respond(kwargs: Dict[str, Any]) -> Any:
        if error is not None:
            return error
        if kwargs.get("stream"):
            return FakeAsyncStream(frames)
        return response

    return _respond


class FakeRawResponse:
    def __init__(self, parsed: Any, headers: Dict[str, str]) -> None:
        self.headers = headers
        self._parsed = parsed

    def parse(self) -> Any:
        return self._parsed


class FakeOpenAIClient:
    """Shape of ``openai.AsyncOpenAI`` used by the adapters: ``chat.completions.create``."""

    def __init__(
        self,
        frames: Iterable[Any] = (),
        *,
        response: Any = None,
        error: Optional[BaseException] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        completions = _Endpoint(_scripted(frames, response, error))
        raw_frames = list(frames)
        raw_headers = dict(headers or {})

        def _raw(kwargs: Dict[str, Any]) -> Any:
            if error is not None:
                return error
            return FakeRawResponse(FakeAsyncStream(raw_frames), raw_headers)

        completions.with_raw_response = _Endpoint(_raw)
        self.chat = SimpleNamespace(completions=completions)

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.chat.completions.calls


class FakeAnthropicClient:
    """Shape of ``anthropic.AsyncAnthropic``: ``messages.create``."""

    def __init__(self, events: Iterable[Any] = (), *, response: Any = None, error: Optional[BaseException] = None) -> None:
        self.messages = _Endpoint(_scripted(events, response, error))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.messages.calls


def openai_frame(content: Optional[str] = None, *, reasoning: Optional[str] = None, usage: Any = None, **extra: Any):
    delta: Dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if reasoning is not None:
        delta["reasoning_content"] = reasoning
    frame: Dict[str, Any] = {"choices": [{"delta": delta}] if delta else []}
    if usage is not None:
        frame["usage"] = usage
    frame.update(extra)
    return frame


def openai_response(text: str, usage: Optional[Dict[str, int]] = None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(**usage) if usage else None,
    )


def anthropic_events(*texts: str, input_tokens: int = 10, output_tokens: int = 5, cache_write: int = 0, cache_read: int = 0):
    events: List[Dict[str, Any]] = [
        {
            "type": "message_start",
            "message": {
                "usage": {
                    "input_tokens": input_tokens,
                    "output_tokens": 1,
                    "cache_creation_input_tokens": cache_write,
                    "cache_read_input_tokens": cache_read,
                }
            },
        }
    ]
    for index, text in enumerate(texts):
        events.append({"type": "content_block_start", "index": index, "content_block": {"type": "text", "text": ""}})
        events.append({"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text}})
    events.append({"type": "message_delta", "usage": {"output_tokens": output_tokens}})
    events.append({"type": "message_stop"})
    return events


class StatusError(Exception):
    """Exception carrying an HTTP status like the SDK errors do."""

    def __init__(self, status_code: int, message: str = "backend failure") -> None:
        super().__init__(message)
        self.status_code = status_code


class VirtualClock:
    """Injectable ``sleep`` that parks callers until the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._waiters: List[tuple] = []

    async def sleep(self, seconds: float) -> None:
        fut = asyncio.get_running_loop().create_future()
        self._waiters.append((self.now + seconds, fut))
        await fut

    async def advance(self, seconds: float) -> None:
        """Move time forward, waking due sleepers and letting their tasks run."""
        self.now += seconds
        due = [w for w in self._waiters if w[0] <= self.now]
        self._waiters = [w for w in self._waiters if w[0] > self.now]
        for _, fut in due:
            if not fut.done():
                fut.set_result(None)
        for _ in range(20):
            await asyncio.sleep(0)


async def collect(stream) -> List[Any]:
    return [chunk async for chunk in stream]
