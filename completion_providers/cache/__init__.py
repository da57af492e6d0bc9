"""Prompt-cache accounting and keep-warm scheduling."""

from .refresh import CacheRefreshScheduler, CacheSession, SessionState
from .tracker import CacheCosts, CacheMetrics, CacheUsageTracker, UsageRecord

__all__ = [
    "CacheRefreshScheduler",
    "CacheSession",
    "SessionState",
    "CacheUsageTracker",
    "CacheMetrics",
    "CacheCosts",
    "UsageRecord",
]
