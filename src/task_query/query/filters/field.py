"""
Base class for filter fields.

Each field recognises the instruction lines it owns and compiles them into
a :class:`Filter`.
"""

import re
from abc import ABC, abstractmethod
from datetime import date

from task_query.errors import FilterParseError
from task_query.query.filters.filter import Filter

REGEX_LITERAL = re.compile(r"^/(?P<pattern>.*)/(?P<flags>[a-z]*)$")

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "u": 0,
}


def compile_regex(text: str) -> re.Pattern:
    """Compile a ``/pattern/flags`` literal.

    Raises:
        FilterParseError: If the text is not a regex literal or does not compile
    """
    match = REGEX_LITERAL.match(text.strip())
    if not match:
        raise FilterParseError(f"Regular expression must be written as /pattern/flags: {text}")

    flags = 0
    for flag in match.group("flags"):
        if flag not in REGEX_FLAGS:
            raise FilterParseError(f"Unsupported regular expression flag '{flag}' in {text}")
        flags |= REGEX_FLAGS[flag]

    try:
        return re.compile(match.group("pattern"), flags)
    except re.error as e:
        raise FilterParseError(f"Invalid regular expression {text}: {e}") from e


class FilterField(ABC):
    """A family of filter instructions."""

    pattern: re.Pattern

    def can_create_filter_for_line(self, line: str) -> bool:
        return bool(self.pattern.match(line))

    @abstractmethod
    def create_filter(self, line: str, today: date) -> Filter:
        """Compile ``line`` into a filter.

        Raises:
            FilterParseError: If the line belongs to this field but is malformed
        """
