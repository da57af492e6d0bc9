"""Keep backend prompt caches warm with periodic minimal requests.

A backend ephemeral prompt cache expires after five idle minutes. For every
scheduled session the :class:`CacheRefreshScheduler` re-sends the session's
system prompt with a one-word user turn every ``period`` seconds (four
minutes by default) and drains the reply, so the cached prefix stays hot.

Session lifecycle::

    scheduled -> refreshing -> scheduled   (steady loop)
    scheduled -> stopped                   (stop / dispose_all)
    refreshing -> stopped                  (stop, or a failed refresh)

Each session runs in its own ``asyncio.Task``. ``stop`` cancels the task
synchronously, so no refresh fires after it returns. A failed refresh is
logged and retires only its own session; it never reaches the caller.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Dict, Optional

from ..base.errors import classify_exception
from ..base.interfaces import CompletionAdapter
from ..base.logging import LogContext, get_logger, log_event
from ..base.models import Message
from ..config.defaults import CACHE_REFRESH_MESSAGE, CACHE_REFRESH_PERIOD_SECONDS, CACHE_RETIRED_HISTORY

Sleep = Callable[[float], Awaitable[None]]


class SessionState(str, Enum):
    SCHEDULED = "scheduled"
    REFRESHING = "refreshing"
    STOPPED = "stopped"


@dataclass
class CacheSession:
    id: str
    adapter: CompletionAdapter
    system_prompt: str
    context: str
    state: SessionState = SessionState.SCHEDULED
    task: Optional["asyncio.Task[None]"] = None
    refreshes: int = 0


class CacheRefreshScheduler:
    """Owns the refresh task of every cache session it scheduled.

    Args:
        period: Seconds between refreshes.
        sleep: Coroutine used to wait between refreshes; defaults to
            ``asyncio.sleep``. Tests inject a virtual clock here.
        retired_history: How many stopped session ids ``session_state``
            still reports as ``STOPPED``; older ones are forgotten.
    """

    def __init__(
        self,
        period: float = CACHE_REFRESH_PERIOD_SECONDS,
        *,
        sleep: Optional[Sleep] = None,
        logger: Optional[logging.Logger] = None,
        retired_history: int = CACHE_RETIRED_HISTORY,
    ) -> None:
        self.period = period
        self._sleep = sleep
        self._sessions: Dict[str, CacheSession] = {}
        self._retired: "OrderedDict[str, None]" = OrderedDict()
        self._retired_history = retired_history
        self._logger = logger or get_logger("providers.cache.refresh")

    def _ctx(self, session: CacheSession) -> LogContext:
        return LogContext(provider=getattr(session.adapter, "provider_name", None), session_id=session.id)

    def schedule(self, adapter: CompletionAdapter, system_prompt: str, context: str) -> str:
        """Start refreshing a new session and return its id.

        Must be called from a running event loop. Returns immediately; the
        first refresh fires one period later.
        """
        session = CacheSession(
            id=str(uuid.uuid4()),
            adapter=adapter,
            system_prompt=system_prompt,
            context=context,
        )
        session.task = asyncio.get_running_loop().create_task(
            self._run(session), name=f"cache-refresh-{session.id}"
        )
        self._sessions[session.id] = session
        log_event(self._logger, "cache.refresh.scheduled", self._ctx(session), period=self.period)
        return session.id

    async def _run(self, session: CacheSession) -> None:
        sleep = self._sleep or asyncio.sleep
        try:
            while session.state is not SessionState.STOPPED:
                await sleep(self.period)
                if session.state is SessionState.STOPPED:
                    return
                session.state = SessionState.REFRESHING
                session.refreshes += 1
                log_event(self._logger, "cache.refresh.tick", self._ctx(session), refresh=session.refreshes)
                await self._refresh(session)
                if session.state is SessionState.REFRESHING:
                    session.state = SessionState.SCHEDULED
        except asyncio.CancelledError:
            return
        except Exception as exc:
            log_event(
                self._logger,
                "cache.refresh.failed",
                self._ctx(session),
                level=logging.ERROR,
                error=str(exc),
                error_code=classify_exception(exc).value,
            )
        finally:
            # a task that is no longer running never reports its session as active
            self._retire(session)

    async def _refresh(self, session: CacheSession) -> None:
        stream = session.adapter.stream_completion(
            session.system_prompt, [Message(role="user", content=CACHE_REFRESH_MESSAGE)]
        )
        async for _ in stream:
            pass

    def _retire(self, session: CacheSession) -> bool:
        if self._sessions.pop(session.id, None) is None:
            return False
        session.state = SessionState.STOPPED
        self._retired[session.id] = None
        while len(self._retired) > self._retired_history:
            self._retired.popitem(last=False)
        log_event(self._logger, "cache.refresh.stopped", self._ctx(session), refreshes=session.refreshes)
        return True

    def stop(self, session_id: str) -> None:
        """Stop refreshing ``session_id``. Unknown or already stopped ids are a no-op."""
        session = self._sessions.get(session_id)
        if session is None or not self._retire(session):
            return
        task = session.task
        try:
            current = asyncio.current_task()
        except RuntimeError:
            # called outside a running loop
            current = None
        if task is not None and not task.done() and task is not current:
            task.cancel()

    def is_active(self, session_id: str) -> bool:
        return session_id in self._sessions

    def active_count(self) -> int:
        return len(self._sessions)

    def session_state(self, session_id: str) -> Optional[SessionState]:
        """Current state of ``session_id``; ``None`` for unknown or long-forgotten ids."""
        session = self._sessions.get(session_id)
        if session is not None:
            return session.state
        return SessionState.STOPPED if session_id in self._retired else None

    def dispose_all(self) -> None:
        """Stop every session."""
        for session_id in list(self._sessions):
            self.stop(session_id)


__all__ = ["SessionState", "CacheSession", "CacheRefreshScheduler"]
