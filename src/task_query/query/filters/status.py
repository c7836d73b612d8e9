"""
Status, priority, recurrence and dependency filters.
"""

import re
from datetime import date

from task_query.errors import FilterParseError
from task_query.models import Priority, StatusType
from task_query.query.filters.field import FilterField
from task_query.query.filters.filter import Filter


class DoneField(FilterField):
    """``done`` and ``not done``."""

    pattern = re.compile(r"^(not\s+)?done$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        negate = bool(self.pattern.match(line).group(1))
        if negate:
            return Filter(line, lambda task, _: not task.is_done, "not done")
        return Filter(line, lambda task, _: task.is_done, "done")


class StatusTypeField(FilterField):
    """``status.type is [not] <TYPE>``."""

    pattern = re.compile(r"^status\.type\s+is\s+(not\s+)?(\S+)$", re.IGNORECASE)

    def can_create_filter_for_line(self, line: str) -> bool:
        return line.lower().startswith("status.type")

    def create_filter(self, line: str, today: date) -> Filter:
        match = self.pattern.match(line)
        if not match:
            raise FilterParseError(f"Do not understand status.type filter: {line}")

        name = match.group(2).upper().replace("-", "_")
        try:
            wanted = StatusType[name]
        except KeyError:
            allowed = ", ".join(t.value for t in StatusType)
            raise FilterParseError(f"Invalid status.type '{match.group(2)}'; allowed: {allowed}") from None

        if match.group(1):
            return Filter(line, lambda task, _: task.status.type != wanted, f"status.type is not {wanted.value}")
        return Filter(line, lambda task, _: task.status.type == wanted, f"status.type is {wanted.value}")


class PriorityField(FilterField):
    """``priority is [above|below|not] <level>``.

    "above" means more urgent: ``priority is above none`` matches every
    task that has any priority.
    """

    pattern = re.compile(r"^priority\s+is\s+(?:(above|below|not)\s+)?(\w+)$", re.IGNORECASE)

    def can_create_filter_for_line(self, line: str) -> bool:
        return line.lower().startswith("priority")

    def create_filter(self, line: str, today: date) -> Filter:
        match = self.pattern.match(line)
        if not match:
            raise FilterParseError(f"Do not understand priority filter: {line}")

        comparison = (match.group(1) or "").lower()
        try:
            level = Priority.from_name(match.group(2))
        except KeyError:
            allowed = ", ".join(p.label for p in Priority)
            raise FilterParseError(f"Invalid priority '{match.group(2)}'; allowed: {allowed}") from None

        if comparison == "above":
            predicate = lambda task, _: task.priority.value < level.value  # noqa: E731
        elif comparison == "below":
            predicate = lambda task, _: task.priority.value > level.value  # noqa: E731
        elif comparison == "not":
            predicate = lambda task, _: task.priority != level  # noqa: E731
        else:
            predicate = lambda task, _: task.priority == level  # noqa: E731

        words = ["priority is", comparison, level.label]
        return Filter(line, predicate, " ".join(w for w in words if w))


class RecurringField(FilterField):
    """``is recurring`` and ``is not recurring``."""

    pattern = re.compile(r"^is\s+(not\s+)?recurring$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        if self.pattern.match(line).group(1):
            return Filter(line, lambda task, _: not task.is_recurring, "is not recurring")
        return Filter(line, lambda task, _: task.is_recurring, "is recurring")


class DependencyField(FilterField):
    """``is [not] blocked`` and ``is [not] blocking``."""

    pattern = re.compile(r"^is\s+(not\s+)?(blocked|blocking)$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        match = self.pattern.match(line)
        negate = bool(match.group(1))
        kind = match.group(2).lower()

        def predicate(task, search_info) -> bool:
            if kind == "blocked":
                result = search_info.is_blocked(task)
            else:
                result = search_info.is_blocking(task)
            return result != negate

        return Filter(line, predicate, f"is {'not ' if negate else ''}{kind}")
