"""Reactive re-evaluation of queries."""

from task_query.sync.change_feed import CacheState, ChangeFeed, InMemoryChangeFeed, TaskSnapshot
from task_query.sync.query_refresh_manager import CachedResult, QueryResultCache, seconds_until_midnight

__all__ = [
    "CacheState",
    "CachedResult",
    "ChangeFeed",
    "InMemoryChangeFeed",
    "QueryResultCache",
    "TaskSnapshot",
    "seconds_until_midnight",
]
