"""Per-request prompt-cache usage and cost accounting.

``CacheUsageTracker`` normalizes the four token counters a caching backend
reports (cache creation, cache read, fresh input, output) and, when the
model carries input and output prices, derives per-request costs and the
savings relative to an uncached request. Prices are USD per million tokens.

Malformed telemetry never fails a request: negative, non-finite or
non-numeric counters are stored as 0.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from ..base.models import ModelInfo

_PER_MILLION = 1_000_000


@dataclass(frozen=True)
class CacheMetrics:
    creation_tokens: int = 0
    read_tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class CacheCosts:
    """Derived request costs in USD.

    ``savings`` is the uncached input cost of ``read + input`` tokens minus
    what caching actually cost (writes, reads and fresh input).
    """

    cache_writes: float
    cache_reads: float
    input_cost: float
    output_cost: float
    total_cost: float
    savings: float


@dataclass(frozen=True)
class UsageRecord:
    request_id: str
    metrics: CacheMetrics
    costs: Optional[CacheCosts]
    recorded_at: float


def normalize_token_count(value: Any) -> int:
    """Coerce raw telemetry to a non-negative finite int; anything else is 0.

    Counters are whole tokens: a fractional report (``"7.9"``) is truncated
    toward zero and every stored counter is an ``int``.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value) if value > 0 else 0


def _raw(usage: Any, name: str) -> Any:
    if isinstance(usage, Mapping):
        return usage.get(name)
    return getattr(usage, name, None)


def calculate_costs(metrics: CacheMetrics, model: ModelInfo) -> CacheCosts:
    """Compute costs for ``metrics``; ``model`` must carry input and output prices.

    A missing cache price zeroes that cache component and the savings, since
    no cached rate is known to compare against.
    """
    input_price = model.input_price or 0.0
    output_price = model.output_price or 0.0
    cache_writes = (
        metrics.creation_tokens / _PER_MILLION * model.cache_writes_price
        if model.cache_writes_price is not None
        else 0.0
    )
    cache_reads = (
        metrics.read_tokens / _PER_MILLION * model.cache_reads_price
        if model.cache_reads_price is not None
        else 0.0
    )
    input_cost = metrics.input_tokens / _PER_MILLION * input_price
    output_cost = metrics.output_tokens / _PER_MILLION * output_price
    if model.cache_writes_price is None or model.cache_reads_price is None:
        savings = 0.0
    else:
        without_cache = (metrics.read_tokens + metrics.input_tokens) / _PER_MILLION * input_price
        savings = without_cache - (cache_writes + cache_reads + input_cost)
    return CacheCosts(
        cache_writes=cache_writes,
        cache_reads=cache_reads,
        input_cost=input_cost,
        output_cost=output_cost,
        total_cost=cache_writes + cache_reads + input_cost + output_cost,
        savings=savings,
    )


class CacheUsageTracker:
    """Stores one :class:`UsageRecord` per request id."""

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._records: Dict[str, UsageRecord] = {}
        self._lock = threading.Lock()

    def record_usage(self, request_id: str, raw_usage: Any, model_info: ModelInfo) -> UsageRecord:
        """Normalize ``raw_usage`` (mapping or SDK object) and store it under ``request_id``.

        Recording the same id again replaces the previous record.
        """
        metrics = CacheMetrics(
            creation_tokens=normalize_token_count(_raw(raw_usage, "cache_creation_input_tokens")),
            read_tokens=normalize_token_count(_raw(raw_usage, "cache_read_input_tokens")),
            input_tokens=normalize_token_count(_raw(raw_usage, "input_tokens")),
            output_tokens=normalize_token_count(_raw(raw_usage, "output_tokens")),
        )
        costs = None
        if model_info.input_price is not None and model_info.output_price is not None:
            costs = calculate_costs(metrics, model_info)
        record = UsageRecord(request_id=request_id, metrics=metrics, costs=costs, recorded_at=self._clock())
        with self._lock:
            self._records[request_id] = record
        return record

    def get_usage(self, request_id: str) -> Optional[UsageRecord]:
        with self._lock:
            return self._records.get(request_id)

    def cleanup(self, max_age_seconds: Optional[float] = None) -> int:
        """Evict records; all of them, or those older than ``max_age_seconds``.

        Returns the number of evicted records.
        """
        with self._lock:
            if max_age_seconds is None:
                evicted = len(self._records)
                self._records.clear()
                return evicted
            cutoff = self._clock() - max_age_seconds
            stale = [rid for rid, rec in self._records.items() if rec.recorded_at < cutoff]
            for rid in stale:
                del self._records[rid]
            return len(stale)

    def __len__(self) -> int:
        return len(self._records)


__all__ = [
    "CacheMetrics",
    "CacheCosts",
    "UsageRecord",
    "CacheUsageTracker",
    "normalize_token_count",
    "calculate_costs",
]
