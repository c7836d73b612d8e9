"""
Date filters: ``due``, ``scheduled``, ``start``, ``created``, ``done`` and ``happens``.

Relative expressions such as ``today`` or ``next week`` are resolved when the
filter is compiled, so a compiled filter always compares against fixed days.
"""

import re
from datetime import date
from typing import Callable

from task_query.dates import DateRange, DateValue, InvalidDate, parse_date_expression
from task_query.errors import FilterParseError
from task_query.models import Task
from task_query.query.filters.field import FilterField
from task_query.query.filters.filter import Filter

DATE_GETTERS: dict[str, Callable[[Task], tuple[DateValue, ...]]] = {
    "due": lambda t: (t.due_date,),
    "scheduled": lambda t: (t.scheduled_date,),
    "start": lambda t: (t.start_date,),
    "created": lambda t: (t.created_date,),
    "done": lambda t: (t.done_date,),
    "happens": lambda t: (t.start_date, t.scheduled_date, t.due_date),
}

FIELD_NAMES = "|".join(DATE_GETTERS)

# Longest operators first so "on or before" is not read as "on"
OPERATORS: dict[str, Callable[[date, DateRange], bool]] = {
    "on or before": lambda d, r: d <= r.end,
    "on or after": lambda d, r: d >= r.start,
    "before": lambda d, r: d < r.start,
    "after": lambda d, r: d > r.end,
    "on": lambda d, r: d in r,
    "in": lambda d, r: d in r,
}

PRESENCE = re.compile(rf"^(has|no)\s+({FIELD_NAMES})\s+date$", re.IGNORECASE)
INVALID = re.compile(rf"^({FIELD_NAMES})\s+date\s+is\s+invalid$", re.IGNORECASE)
COMPARISON = re.compile(
    rf"^({FIELD_NAMES})\s+(?:({'|'.join(OPERATORS)})\s+)?(.+)$",
    re.IGNORECASE,
)


class DateField(FilterField):
    """All date fields share one grammar."""

    pattern = re.compile(rf"^(?:(?:has|no)\s+(?:{FIELD_NAMES})\s+date$|(?:{FIELD_NAMES})\s+\S)", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        if match := PRESENCE.match(line):
            return self._presence_filter(line, match.group(1).lower(), match.group(2).lower())

        if match := INVALID.match(line):
            name = match.group(1).lower()
            getter = DATE_GETTERS[name]
            return Filter(
                line,
                lambda task, _: any(isinstance(value, InvalidDate) for value in getter(task)),
                f"{name} date is invalid",
            )

        if match := COMPARISON.match(line):
            return self._comparison_filter(line, match, today)

        raise FilterParseError(f"Do not understand date filter: {line}")

    def _presence_filter(self, line: str, kind: str, name: str) -> Filter:
        getter = DATE_GETTERS[name]

        def has_date(task, _) -> bool:
            return any(isinstance(value, date) for value in getter(task))

        if kind == "has":
            return Filter(line, has_date, f"has {name} date")
        return Filter(line, lambda task, info: not has_date(task, info), f"no {name} date")

    def _comparison_filter(self, line: str, match: re.Match, today: date) -> Filter:
        name = match.group(1).lower()
        operator = " ".join((match.group(2) or "on").lower().split())
        expression = match.group(3)

        date_range = parse_date_expression(expression, today)
        if date_range is None and match.group(2):
            # "due in 3 days": the "in" belongs to the date expression
            date_range = parse_date_expression(f"{match.group(2)} {expression}", today)
            operator = "on"
        if date_range is None:
            raise FilterParseError(f"Do not understand {name} date: {expression}")

        getter = DATE_GETTERS[name]
        compare = OPERATORS[operator]

        def predicate(task, _) -> bool:
            # Absent and invalid dates never match a comparison
            return any(isinstance(value, date) and compare(value, date_range) for value in getter(task))

        return Filter(line, predicate, f"{name} date is {operator} {date_range}")
