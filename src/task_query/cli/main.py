"""Main CLI entry point for task-query."""  # pragma: no cover

from task_query.cli.app import app  # pragma: no cover

# Register commands
from task_query.cli.commands import query, recurrence, watch  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    # start the app
    app()
