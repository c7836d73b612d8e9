"""CLI commands for task-query."""

from . import query, recurrence, watch

__all__ = [
    "query",
    "recurrence",
    "watch",
]
