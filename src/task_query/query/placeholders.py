"""
Expansion of ``{{...}}`` placeholders in query lines.

Placeholders read values from the file containing the query, for example::

    path includes {{query.file.folder}}
    tags include {{query.file.property('context')}}
"""

import re
from datetime import date, datetime
from typing import Any

from task_query.errors import PlaceholderResolutionError
from task_query.models import TasksFile
from task_query.query.statement import Statement

PLACEHOLDER = re.compile(r"\{\{\s*(.*?)\s*\}\}")
PROPERTY_CALL = re.compile(r"""^query\.file\.(property|hasProperty)\(\s*(['"])(.+?)\2\s*\)$""")

FILE_ATTRIBUTES = {
    "query.file.path": lambda f: f.path,
    "query.file.folder": lambda f: f.folder,
    "query.file.filename": lambda f: f.filename,
    "query.file.filenameWithoutExtension": lambda f: f.filename_without_extension,
    "query.file.root": lambda f: f.root,
}


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(_format_value(item) for item in value)
    return str(value)


def resolve_placeholder(expression: str, tasks_file: TasksFile | None) -> str:
    """Resolve the text between ``{{`` and ``}}``.

    Raises:
        PlaceholderResolutionError: If the expression is unknown or has no value
    """
    if tasks_file is None:
        raise PlaceholderResolutionError(
            f"Cannot expand placeholder {{{{{expression}}}}}: the query has no file context"
        )

    if expression in FILE_ATTRIBUTES:
        return FILE_ATTRIBUTES[expression](tasks_file)

    if match := PROPERTY_CALL.match(expression):
        function, _, name = match.groups()
        if function == "hasProperty":
            return _format_value(tasks_file.has_property(name))
        value = tasks_file.get_property(name)
        if value is None:
            raise PlaceholderResolutionError(
                f"Cannot expand placeholder {{{{{expression}}}}}: "
                f"property '{name}' is not set in '{tasks_file.path}'"
            )
        return _format_value(value)

    raise PlaceholderResolutionError(f"Unknown placeholder {{{{{expression}}}}}")


def expand_placeholders(statement: Statement, tasks_file: TasksFile | None) -> Statement:
    """Return the statement with every placeholder substituted.

    Raises:
        PlaceholderResolutionError: Carrying the statement, if any placeholder fails
    """
    text = statement.raw_instruction
    if "{{" not in text:
        return statement

    try:
        expanded = PLACEHOLDER.sub(lambda m: resolve_placeholder(m.group(1), tasks_file), text)
    except PlaceholderResolutionError as e:
        raise PlaceholderResolutionError(e.message, statement) from e
    return statement.with_expansion(expanded)
