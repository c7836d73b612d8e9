"""
Groupers: ``group by <property> [reverse]`` and ``group by function [reverse] <expression>``.

A grouper gives each task one or more group names. Several ``group by``
lines nest: the first is the outermost level.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from task_query.dates import DateValue, InvalidDate
from task_query.errors import QueryParseError
from task_query.models import Priority, Task
from task_query.query.field_resolver import happens_date
from task_query.query.results import TaskGroup
from task_query.query.search_info import SearchInfo
from task_query.query.sorting import function_key

GroupNames = Callable[[Task, SearchInfo], list[str]]

GROUP_PATTERN = re.compile(r"^group\s+by\s+(\S+)(\s+reverse)?$", re.IGNORECASE)
FUNCTION_PATTERN = re.compile(r"^group\s+by\s+function\s+(reverse\s+)?(.+)$", re.IGNORECASE)

PRIORITY_NAMES = {
    Priority.HIGHEST: "Highest priority",
    Priority.HIGH: "High priority",
    Priority.MEDIUM: "Medium priority",
    Priority.LOW: "Low priority",
    Priority.LOWEST: "Lowest priority",
    Priority.NONE: "No priority",
}


def date_group_name(value: DateValue, name: str) -> str:
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d %A")
    if isinstance(value, InvalidDate):
        return f"Invalid {name} date"
    return f"No {name} date"


def _date_grouper(name: str, getter: Callable[[Task], DateValue]) -> GroupNames:
    return lambda task, _: [date_group_name(getter(task), name)]


def _backlink(task: Task) -> str:
    filename = task.file.filename_without_extension or "Unknown Location"
    if task.heading and task.heading != filename:
        return f"{filename} > {task.heading}"
    return filename


GROUPERS: dict[str, GroupNames] = {
    "status": lambda t, _: ["Done" if t.is_done else "Todo"],
    "status.type": lambda t, _: [t.status.type.value],
    "status.name": lambda t, _: [t.status.name],
    "priority": lambda t, _: [PRIORITY_NAMES[t.priority]],
    "due": _date_grouper("due", lambda t: t.due_date),
    "scheduled": _date_grouper("scheduled", lambda t: t.scheduled_date),
    "start": _date_grouper("start", lambda t: t.start_date),
    "created": _date_grouper("created", lambda t: t.created_date),
    "done": _date_grouper("done", lambda t: t.done_date),
    "happens": _date_grouper("happens", happens_date),
    "path": lambda t, _: [t.path],
    "folder": lambda t, _: [t.file.folder],
    "filename": lambda t, _: [t.file.filename],
    "root": lambda t, _: [t.file.root],
    "heading": lambda t, _: [t.heading or "(No heading)"],
    "backlink": lambda t, _: [_backlink(t)],
    "tags": lambda t, _: list(t.tags) or ["(No tags)"],
    "recurring": lambda t, _: ["Recurring" if t.is_recurring else "Not Recurring"],
    "recurrence": lambda t, _: [t.recurrence_rule or "None"],
}


def _function_names(value: Any) -> list[str]:
    if value is None or value == "":
        return [""]
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value] or [""]
    if isinstance(value, bool):
        return ["true" if value else "false"]
    if isinstance(value, date):
        return [value.isoformat()]
    return [str(value)]


@dataclass(frozen=True)
class Grouper:
    """One level of grouping."""

    instruction: str
    property: str
    group_names: GroupNames
    reverse: bool = False

    def names_for(self, task: Task, search_info: SearchInfo) -> list[str]:
        """Distinct group names for a task, in the order the grouper gave them."""
        return list(dict.fromkeys(self.group_names(task, search_info)))


def parse_grouper(line: str) -> Grouper:
    """Compile a ``group by`` instruction.

    Raises:
        QueryParseError: If the property is unknown or the line is malformed
    """
    line = line.strip()

    if match := FUNCTION_PATTERN.match(line):
        key = function_key(match.group(2).strip())
        return Grouper(
            line,
            "function",
            lambda task, search_info: _function_names(key(task, search_info)),
            reverse=bool(match.group(1)),
        )

    match = GROUP_PATTERN.match(line)
    if not match or match.group(1).lower() not in GROUPERS:
        raise QueryParseError(f"do not understand query: {line}")

    name = match.group(1).lower()
    return Grouper(line, name, GROUPERS[name], reverse=bool(match.group(2)))


def partition(tasks: list[Task], groupers: list[Grouper], search_info: SearchInfo) -> list[TaskGroup]:
    """Split sorted tasks into groups.

    Groups appear in the order their first task appears, reversed per level
    for reversed groupers. Tasks keep their sorted order inside each group.
    A task with several names at one level is placed in each of those groups.
    """
    return _partition(tasks, groupers, search_info, ())


def _partition(
    tasks: list[Task], groupers: list[Grouper], search_info: SearchInfo, names: tuple[str, ...]
) -> list[TaskGroup]:
    if not groupers:
        return [TaskGroup(names, tuple(tasks))]

    grouper, remaining = groupers[0], groupers[1:]
    buckets: dict[str, list[Task]] = {}
    for task in tasks:
        for name in grouper.names_for(task, search_info):
            buckets.setdefault(name, []).append(task)

    ordered = list(buckets)
    if grouper.reverse:
        ordered.reverse()

    groups: list[TaskGroup] = []
    for name in ordered:
        groups.extend(_partition(buckets[name], remaining, search_info, names + (name,)))
    return groups


def apply_limits(groups: list[TaskGroup], limit: int | None, group_limit: int | None) -> list[TaskGroup]:
    """Cap each group at ``group_limit`` tasks, then the whole result at ``limit``.

    The total limit walks groups in order until it is used up; groups left
    empty are dropped.
    """
    if group_limit is not None:
        groups = [TaskGroup(g.names, g.tasks[:group_limit]) for g in groups]

    if limit is not None:
        remaining = limit
        limited: list[TaskGroup] = []
        for group in groups:
            taken = group.tasks[: max(remaining, 0)]
            remaining -= len(taken)
            limited.append(TaskGroup(group.names, taken))
        groups = limited

    return [g for g in groups if g.tasks]
