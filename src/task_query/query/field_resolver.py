"""
Field resolver for query expressions.

Resolves field references like 'task.due', 'task.file.path' or
'query.file.property.context' against a task and its search context.
"""

from datetime import date
from typing import Any, Callable

from task_query.dates import DateValue
from task_query.errors import QueryExecutionError
from task_query.models import Task, TasksFile
from task_query.query.search_info import SearchInfo


def _date(value: DateValue) -> date | None:
    return value if isinstance(value, date) else None


def happens_date(task: Task) -> date | None:
    """Earliest valid date among start, scheduled and due."""
    dates = [d for d in (_date(task.start_date), _date(task.scheduled_date), _date(task.due_date)) if d]
    return min(dates) if dates else None


FILE_ATTRIBUTES: dict[str, Callable[[TasksFile], Any]] = {
    "path": lambda f: f.path,
    "folder": lambda f: f.folder,
    "filename": lambda f: f.filename,
    "filenameWithoutExtension": lambda f: f.filename_without_extension,
    "root": lambda f: f.root,
}


class FieldResolver:
    """Resolves field values for a task."""

    TASK_FIELDS: dict[str, Callable[[Task, SearchInfo], Any]] = {
        "task.description": lambda t, s: t.description,
        "task.status.name": lambda t, s: t.status.name,
        "task.status.type": lambda t, s: t.status.type.value,
        "task.status.symbol": lambda t, s: t.status.symbol,
        "task.isDone": lambda t, s: t.is_done,
        "task.priority": lambda t, s: t.priority.label,
        "task.priority.number": lambda t, s: t.priority.value,
        "task.start": lambda t, s: _date(t.start_date),
        "task.scheduled": lambda t, s: _date(t.scheduled_date),
        "task.due": lambda t, s: _date(t.due_date),
        "task.created": lambda t, s: _date(t.created_date),
        "task.done": lambda t, s: _date(t.done_date),
        "task.happens": lambda t, s: happens_date(t),
        "task.tags": lambda t, s: list(t.tags),
        "task.isRecurring": lambda t, s: t.is_recurring,
        "task.recurrence": lambda t, s: t.recurrence_rule or None,
        "task.id": lambda t, s: t.id or None,
        "task.dependsOn": lambda t, s: list(t.depends_on),
        "task.isBlocked": lambda t, s: s.is_blocked(t),
        "task.isBlocking": lambda t, s: s.is_blocking(t),
        "task.heading": lambda t, s: t.heading,
        "task.lineNumber": lambda t, s: t.location.line_number,
    }

    TASK_FILE_PREFIX = "task.file."
    QUERY_FILE_PREFIX = "query.file."
    PROPERTY_SEGMENT = "property."

    @classmethod
    def canonical_name(cls, field_name: str) -> str:
        """Bare names such as 'due' are shorthand for 'task.due'."""
        if field_name.startswith(("task.", "query.")):
            return field_name
        return f"task.{field_name}"

    @classmethod
    def is_known_field(cls, field_name: str) -> bool:
        name = cls.canonical_name(field_name)
        if name in cls.TASK_FIELDS:
            return True
        for prefix in (cls.TASK_FILE_PREFIX, cls.QUERY_FILE_PREFIX):
            if name.startswith(prefix):
                rest = name[len(prefix) :]
                return rest in FILE_ATTRIBUTES or (
                    rest.startswith(cls.PROPERTY_SEGMENT) and len(rest) > len(cls.PROPERTY_SEGMENT)
                )
        return False

    @classmethod
    def resolve_field(cls, task: Task, search_info: SearchInfo, field_name: str) -> Any:
        """
        Resolve a field value for a task.

        Args:
            task: Task being evaluated
            search_info: Context of the current evaluation
            field_name: Field name to resolve (e.g., 'task.due', 'query.file.path')

        Returns:
            Field value; None for absent or invalid dates and missing properties

        Raises:
            QueryExecutionError: If the field is unknown or the query has no file
        """
        name = cls.canonical_name(field_name)
        if name in cls.TASK_FIELDS:
            return cls.TASK_FIELDS[name](task, search_info)

        if name.startswith(cls.TASK_FILE_PREFIX):
            return cls._resolve_file_field(task.file, name[len(cls.TASK_FILE_PREFIX) :], field_name)

        if name.startswith(cls.QUERY_FILE_PREFIX):
            if search_info.tasks_file is None:
                raise QueryExecutionError(f"'{field_name}' needs a query file, but the query has none")
            return cls._resolve_file_field(
                search_info.tasks_file, name[len(cls.QUERY_FILE_PREFIX) :], field_name
            )

        raise QueryExecutionError(f"Unknown field: {field_name}")

    @classmethod
    def _resolve_file_field(cls, tasks_file: TasksFile, attribute: str, field_name: str) -> Any:
        if attribute in FILE_ATTRIBUTES:
            return FILE_ATTRIBUTES[attribute](tasks_file)
        if attribute.startswith(cls.PROPERTY_SEGMENT):
            return tasks_file.get_property(attribute[len(cls.PROPERTY_SEGMENT) :])
        raise QueryExecutionError(f"Unknown field: {field_name}")
