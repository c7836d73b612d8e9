"""
Sorters: ``sort by <property> [reverse]`` and ``sort by function [reverse] <expression>``.

A comparator returns -1, 0 or 1. Reversing a sorter negates its comparator,
so tasks that tie keep their input order in both directions.
"""

import re
from dataclasses import dataclass, field
from datetime import date
from functools import cmp_to_key
from typing import Any, Callable, Iterable

from task_query.dates import DateValue, InvalidDate
from task_query.errors import FilterParseError, QueryExecutionError, QueryParseError
from task_query.models import StatusType, Task
from task_query.query.expression_eval import ExpressionEvaluator
from task_query.query.field_resolver import happens_date
from task_query.query.filters.function import compile_expression
from task_query.query.search_info import SearchInfo

Comparator = Callable[[Task, Task, SearchInfo], int]

STATUS_TYPE_ORDER = (
    StatusType.IN_PROGRESS,
    StatusType.TODO,
    StatusType.ON_HOLD,
    StatusType.DONE,
    StatusType.CANCELLED,
    StatusType.NON_TASK,
)

SORT_PATTERN = re.compile(r"^sort\s+by\s+(\S+?)(?:\s+(\d+))?(\s+reverse)?$", re.IGNORECASE)
FUNCTION_PATTERN = re.compile(r"^sort\s+by\s+function\s+(reverse\s+)?(.+)$", re.IGNORECASE)


def sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_values(a: Any, b: Any) -> int:
    return sign((a > b) - (a < b))


def by_key(key: Callable[[Task], Any]) -> Comparator:
    """Comparator ordering tasks by a sortable key."""

    def comparator(a: Task, b: Task, _: SearchInfo) -> int:
        return compare_values(key(a), key(b))

    return comparator


def reversed_comparator(comparator: Comparator) -> Comparator:
    """Negate a comparator, normalizing its result to -1, 0 or 1."""

    def reverse(a: Task, b: Task, search_info: SearchInfo) -> int:
        return -sign(comparator(a, b, search_info))

    return reverse


def normalized_comparator(comparator: Comparator) -> Comparator:
    def normalized(a: Task, b: Task, search_info: SearchInfo) -> int:
        return sign(comparator(a, b, search_info))

    return normalized


def date_key(value: DateValue) -> tuple:
    """Valid dates first in date order, then invalid dates, then absent ones."""
    if isinstance(value, date):
        return (0, value)
    if isinstance(value, InvalidDate):
        return (1, value.text)
    return (2,)


def _text_key(value: str | None) -> tuple:
    # Missing text sorts last
    return (1, "") if not value else (0, value.casefold())


def _tag_key(index: int) -> Callable[[Task], tuple]:
    def key(task: Task) -> tuple:
        if len(task.tags) < index:
            return (1, "")
        return (0, task.tags[index - 1].casefold())

    return key


SORT_KEYS: dict[str, Callable[[Task], Any]] = {
    "status": lambda t: t.is_done,
    "status.type": lambda t: STATUS_TYPE_ORDER.index(t.status.type),
    "status.name": lambda t: t.status.name.casefold(),
    "priority": lambda t: t.priority.value,
    "due": lambda t: date_key(t.due_date),
    "scheduled": lambda t: date_key(t.scheduled_date),
    "start": lambda t: date_key(t.start_date),
    "created": lambda t: date_key(t.created_date),
    "done": lambda t: date_key(t.done_date),
    "happens": lambda t: date_key(happens_date(t)),
    "description": lambda t: t.description.casefold(),
    "path": lambda t: t.path.casefold(),
    "filename": lambda t: t.file.filename.casefold(),
    "heading": lambda t: _text_key(t.heading),
    "recurring": lambda t: not t.is_recurring,
    "id": lambda t: _text_key(t.id),
}


@dataclass(frozen=True)
class Sorter:
    """A named comparator, optionally reversed."""

    instruction: str
    property: str
    comparator: Comparator
    reverse: bool = False
    effective: Comparator = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.reverse:
            effective = reversed_comparator(self.comparator)
        else:
            effective = normalized_comparator(self.comparator)
        object.__setattr__(self, "effective", effective)

    def compare(self, a: Task, b: Task, search_info: SearchInfo) -> int:
        return self.effective(a, b, search_info)


def compose(sorters: Iterable[Sorter]) -> Comparator:
    """Apply sorters in order, each breaking the ties of the one before."""
    sorters = tuple(sorters)

    def comparator(a: Task, b: Task, search_info: SearchInfo) -> int:
        for sorter in sorters:
            result = sorter.compare(a, b, search_info)
            if result != 0:
                return result
        return 0

    return comparator


def sort_tasks(tasks: list[Task], sorters: list[Sorter], search_info: SearchInfo) -> list[Task]:
    """Stable sort; with no sorters the input order is kept."""
    if not sorters:
        return list(tasks)
    comparator = compose(sorters)
    return sorted(tasks, key=cmp_to_key(lambda a, b: comparator(a, b, search_info)))


def function_key(expression_text: str) -> Callable[[Task, SearchInfo], Any]:
    """Evaluate an expression per task; failures yield None.

    Raises:
        QueryParseError: If the expression does not compile
    """
    try:
        expression = compile_expression(expression_text)
    except FilterParseError as e:
        raise QueryParseError(e.message) from e

    def key(task: Task, search_info: SearchInfo) -> Any:
        try:
            return ExpressionEvaluator(task, search_info).evaluate(expression)
        except (QueryExecutionError, TypeError):
            return None

    return key


def _compare_function_values(a: Any, b: Any) -> int:
    # None sorts last; values of different types compare as text
    if a is None or b is None:
        return compare_values(a is None, b is None)
    try:
        return compare_values(a, b)
    except TypeError:
        return compare_values(str(a), str(b))


def parse_sorter(line: str) -> Sorter:
    """Compile a ``sort by`` instruction.

    Raises:
        QueryParseError: If the property is unknown or the line is malformed
    """
    line = line.strip()

    if match := FUNCTION_PATTERN.match(line):
        key = function_key(match.group(2).strip())

        def comparator(a: Task, b: Task, search_info: SearchInfo) -> int:
            return _compare_function_values(key(a, search_info), key(b, search_info))

        return Sorter(line, "function", comparator, reverse=bool(match.group(1)))

    match = SORT_PATTERN.match(line)
    if not match:
        raise QueryParseError(f"do not understand query: {line}")

    name = match.group(1).lower()
    reverse = bool(match.group(3))

    if name == "tag":
        index = int(match.group(2) or 1)
        if index < 1:
            raise QueryParseError(f"Tag index must be 1 or more: {line}")
        return Sorter(line, "tag", by_key(_tag_key(index)), reverse)

    if match.group(2) or name not in SORT_KEYS:
        raise QueryParseError(f"do not understand query: {line}")
    return Sorter(line, name, by_key(SORT_KEYS[name]), reverse)
