"""Keep-warm scheduler driven by a virtual clock (no real sleeps)."""
from __future__ import annotations

import asyncio
from typing import List

from completion_providers.base.chunks import TextChunk, UsageChunk
from completion_providers.cache.refresh import CacheRefreshScheduler, SessionState


class _RecordingAdapter:
    provider_name = "fake"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: List[tuple] = []

    async def stream_completion(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        if self.fail:
            raise RuntimeError("backend unavailable")
        yield TextChunk("ok")
        yield UsageChunk(input_tokens=1, output_tokens=1)


async def test_refresh_fires_each_period(virtual_clock, log_events):
    adapter = _RecordingAdapter()
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    session_id = scheduler.schedule(adapter, "system", "ctx")
    await virtual_clock.advance(0)
    assert adapter.calls == []

    await virtual_clock.advance(240)
    assert len(adapter.calls) == 1
    system, messages = adapter.calls[0]
    assert system == "system"
    assert messages[0].role == "user"
    assert messages[0].content == "Continue"
    assert scheduler.session_state(session_id) is SessionState.SCHEDULED

    await virtual_clock.advance(240)
    assert len(adapter.calls) == 2
    assert len(log_events.named("cache.refresh.tick")) == 2
    scheduler.dispose_all()


async def test_stop_is_synchronous_and_idempotent(virtual_clock):
    adapter = _RecordingAdapter()
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    session_id = scheduler.schedule(adapter, "s", "")
    await virtual_clock.advance(0)

    scheduler.stop(session_id)
    scheduler.stop(session_id)
    scheduler.stop("never-scheduled")
    assert not scheduler.is_active(session_id)
    assert scheduler.session_state(session_id) is SessionState.STOPPED
    assert scheduler.session_state("never-scheduled") is None

    await virtual_clock.advance(1000)
    assert adapter.calls == []


async def test_failed_refresh_retires_only_its_session(virtual_clock, log_events):
    broken = _RecordingAdapter(fail=True)
    healthy = _RecordingAdapter()
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    broken_id = scheduler.schedule(broken, "s", "")
    healthy_id = scheduler.schedule(healthy, "s", "")
    await virtual_clock.advance(0)

    await virtual_clock.advance(240)
    assert scheduler.session_state(broken_id) is SessionState.STOPPED
    assert scheduler.is_active(healthy_id)
    (failed,) = log_events.named("cache.refresh.failed")
    assert failed["provider"] == "fake"
    assert failed["session_id"] == broken_id

    await virtual_clock.advance(240)
    assert len(broken.calls) == 1
    assert len(healthy.calls) == 2
    scheduler.dispose_all()


async def test_dispose_all_stops_every_session(virtual_clock):
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    ids = [scheduler.schedule(_RecordingAdapter(), "s", "") for _ in range(3)]
    assert scheduler.active_count() == 3
    scheduler.dispose_all()
    await virtual_clock.advance(0)
    assert scheduler.active_count() == 0
    assert all(scheduler.session_state(i) is SessionState.STOPPED for i in ids)


async def test_first_refresh_waits_a_full_period(virtual_clock):
    adapter = _RecordingAdapter()
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    scheduler.schedule(adapter, "cached system prompt", "ctx")
    await virtual_clock.advance(0)

    await virtual_clock.advance(239)
    assert adapter.calls == []

    await virtual_clock.advance(1)
    assert len(adapter.calls) == 1
    system, messages = adapter.calls[0]
    assert system == "cached system prompt"
    assert [(m.role, m.content) for m in messages] == [("user", "Continue")]
    scheduler.dispose_all()


async def test_no_refresh_fires_after_dispose_all(virtual_clock):
    adapters = [_RecordingAdapter(), _RecordingAdapter()]
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep)
    for adapter in adapters:
        scheduler.schedule(adapter, "s", "")
    await virtual_clock.advance(0)

    scheduler.dispose_all()
    assert scheduler.active_count() == 0
    await virtual_clock.advance(240 * 5)
    assert [a.calls for a in adapters] == [[], []]
    assert scheduler.active_count() == 0


async def test_failing_sleep_retires_the_session(log_events):
    async def broken_sleep(_seconds):
        raise RuntimeError("clock gone")

    scheduler = CacheRefreshScheduler(period=240, sleep=broken_sleep)
    session_id = scheduler.schedule(_RecordingAdapter(), "s", "")
    for _ in range(5):
        await asyncio.sleep(0)

    assert not scheduler.is_active(session_id)
    assert scheduler.session_state(session_id) is SessionState.STOPPED
    (failed,) = log_events.named("cache.refresh.failed")
    assert failed["error"] == "clock gone"
    assert len(log_events.named("cache.refresh.stopped")) == 1


async def test_retired_history_is_bounded(virtual_clock):
    scheduler = CacheRefreshScheduler(period=240, sleep=virtual_clock.sleep, retired_history=2)
    ids = [scheduler.schedule(_RecordingAdapter(), "s", "") for _ in range(3)]
    scheduler.dispose_all()
    await virtual_clock.advance(0)

    assert scheduler.session_state(ids[0]) is None
    assert [scheduler.session_state(i) for i in ids[1:]] == [SessionState.STOPPED, SessionState.STOPPED]
