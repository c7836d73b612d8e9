"""
Text filters: substring and regex matching on task and file text.
"""

import re
from datetime import date
from typing import Callable

from task_query.errors import FilterParseError
from task_query.models import Task
from task_query.query.filters.field import FilterField, compile_regex
from task_query.query.filters.filter import Filter

TEXT_GETTERS: dict[str, Callable[[Task], str | None]] = {
    "description": lambda t: t.description,
    "path": lambda t: t.path,
    "folder": lambda t: t.file.folder,
    "filename": lambda t: t.file.filename,
    "root": lambda t: t.file.root,
    "heading": lambda t: t.heading,
    "recurrence": lambda t: t.recurrence_rule,
    "status.name": lambda t: t.status.name,
}


class TextField(FilterField):
    """``<field> (includes|does not include) <text>`` and
    ``<field> regex (matches|does not match) /pattern/flags``.

    Substring matching ignores case. A missing value (no heading) never
    includes anything.
    """

    def __init__(self, name: str):
        self.name = name
        self.getter = TEXT_GETTERS[name]
        field_name = re.escape(name)
        self.pattern = re.compile(rf"^{field_name}\s", re.IGNORECASE)
        self.substring = re.compile(rf"^{field_name}\s+(includes|does not include)\s+(.*)$", re.IGNORECASE)
        self.regex = re.compile(rf"^{field_name}\s+regex\s+(matches|does not match)\s+(.*)$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        if match := self.substring.match(line):
            return self._substring_filter(line, match.group(1).lower(), match.group(2))
        if match := self.regex.match(line):
            return self._regex_filter(line, match.group(1).lower(), match.group(2))
        raise FilterParseError(f"Do not understand {self.name} filter: {line}")

    def _substring_filter(self, line: str, operator: str, needle: str) -> Filter:
        wanted = needle.strip().lower()
        getter = self.getter

        def includes(task, _) -> bool:
            value = getter(task)
            return value is not None and wanted in value.lower()

        if operator == "includes":
            return Filter(line, includes, f"{self.name} includes {needle.strip()}")
        return Filter(line, lambda task, info: not includes(task, info), f"{self.name} does not include {needle.strip()}")

    def _regex_filter(self, line: str, operator: str, literal: str) -> Filter:
        regex = compile_regex(literal)
        getter = self.getter

        def matches(task, _) -> bool:
            value = getter(task)
            return value is not None and regex.search(value) is not None

        if operator == "matches":
            return Filter(line, matches, f"{self.name} regex matches {literal.strip()}")
        return Filter(line, lambda task, info: not matches(task, info), f"{self.name} regex does not match {literal.strip()}")


class TagsField(FilterField):
    """Tag filters.

    ``tags include #x`` matches any tag containing ``#x`` (case-insensitive);
    a needle without ``#`` matches anywhere in the tag text.
    """

    pattern = re.compile(r"^(?:tags?\s|has\s+tags$|no\s+tags$)", re.IGNORECASE)
    presence = re.compile(r"^(has|no)\s+tags$", re.IGNORECASE)
    substring = re.compile(r"^tags?\s+(includes?|does not include|do not include)\s+(.*)$", re.IGNORECASE)
    regex = re.compile(r"^tags?\s+regex\s+(matches|does not match)\s+(.*)$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        if match := self.presence.match(line):
            if match.group(1).lower() == "has":
                return Filter(line, lambda task, _: bool(task.tags), "has tags")
            return Filter(line, lambda task, _: not task.tags, "no tags")

        if match := self.substring.match(line):
            wanted = match.group(2).strip().lower()
            if not wanted:
                raise FilterParseError(f"Tag filter needs a tag: {line}")

            def includes(task, _) -> bool:
                return any(wanted in tag.lower() for tag in task.tags)

            if match.group(1).lower().startswith("include"):
                return Filter(line, includes, f"tags include {wanted}")
            return Filter(line, lambda task, info: not includes(task, info), f"tags do not include {wanted}")

        if match := self.regex.match(line):
            regex = compile_regex(match.group(2))

            def matches(task, _) -> bool:
                return any(regex.search(tag) for tag in task.tags)

            if match.group(1).lower() == "matches":
                return Filter(line, matches, f"tags regex matches {match.group(2).strip()}")
            return Filter(line, lambda task, info: not matches(task, info), f"tags regex does not match {match.group(2).strip()}")

        raise FilterParseError(f"Do not understand tag filter: {line}")
