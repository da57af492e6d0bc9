from __future__ import annotations

import json
import logging

from completion_providers.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    LogContext,
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)
from completion_providers.base.log_support import JsonFormatter


def test_child_loggers_propagate_to_shared_logger():
    base = get_logger()
    child = get_logger("providers.anthropic")
    assert base.name == "providers"
    assert base.propagate is False
    assert child.parent is base
    assert child.propagate is True
    assert not child.handlers


def test_log_event_drops_none_fields(log_events):
    log_event(get_logger("providers.test"), "x.happened", LogContext(provider="p", model=None), count=2, skip=None)
    (event,) = log_events.named("x.happened")
    assert event["provider"] == "p"
    assert event["count"] == 2
    assert "model" not in event
    assert "skip" not in event


def test_normalized_event_has_required_keys(log_events):
    normalized_log_event(get_logger("providers.test"), "y", phase="usage", tokens=[("prompt", 3)])
    (event,) = log_events.named("y")
    for key in REQUIRED_NORMALIZED_KEYS:
        if key != "error_code":
            assert key in event
    assert event["tokens"] == {"prompt": 3}
    assert event["attempt"] is None


def test_json_formatter_hoists_payload():
    record = logging.LogRecord("providers", logging.INFO, __file__, 1, json.dumps({"event": "z", "n": 1}), None, None)
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "z"
    assert line["n"] == 1
    assert line["level"] == "INFO"
    assert "msg" not in line


def test_configure_logger_attaches_and_removes_file_handler(tmp_path):
    target = tmp_path / "logs" / "providers.log"
    logger = configure_logger(level="WARNING", file_path=str(target))
    try:
        assert logger.level == logging.WARNING
        assert any(getattr(h, "baseFilename", None) == str(target) for h in logger.handlers)
    finally:
        logger = configure_logger(level=logging.INFO, file_path=None)
    assert not any(getattr(h, "baseFilename", None) == str(target) for h in logger.handlers)
