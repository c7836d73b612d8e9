"""task-query - query language and recurrence engine for markdown task lists."""

__version__ = "0.4.0"
