"""Command line interface for task-query."""
