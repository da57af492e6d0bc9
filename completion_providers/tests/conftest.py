"""Shared fixtures for the completion core test suite.

- ``log_events`` captures structured events from the shared ``providers``
  logger as decoded dicts.
- ``virtual_clock`` drives the cache refresh scheduler without real sleeps.
- Provider configuration is isolated from the developer's environment.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

import pytest

from completion_providers.base.logging import get_logger
from completion_providers.config import reset_config_cache
from completion_providers.config.env import ENV_ALIASES, ENV_MAP
from completion_providers.tests.fakes import VirtualClock


class _EventHandler(logging.Handler):
    """Collect JSON log payloads; non-JSON messages are kept verbatim."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        msg = record.getMessage()
        try:
            payload = json.loads(msg)
        except ValueError:
            payload = {"event": None, "message": msg}
        payload["_level"] = record.levelno
        self.events.append(payload)


class EventLog(list):
    def named(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self if e.get("event") == event]


@pytest.fixture()
def log_events() -> Iterator[EventLog]:
    base = get_logger()
    handler = _EventHandler()
    previous_level = base.level
    base.setLevel(logging.DEBUG)
    base.addHandler(handler)
    events = EventLog()
    handler.events = events
    try:
        yield events
    finally:
        base.removeHandler(handler)
        base.setLevel(previous_level)


@pytest.fixture()
def virtual_clock() -> VirtualClock:
    return VirtualClock()


@pytest.fixture(autouse=True)
def isolated_provider_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep real credentials and config files out of the tests."""
    names = set(ENV_MAP.values())
    for aliases in ENV_ALIASES.values():
        names.update(aliases)
    for name in names:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("PROVIDERS_CONFIG_FILE", raising=False)
    reset_config_cache()
    yield
    reset_config_cache()
