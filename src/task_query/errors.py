"""
Custom exceptions for query compilation, evaluation and recurrence.
"""

from typing import Any


class TaskQueryError(Exception):
    """Base exception for all task-query errors."""

    pass


class InvalidDateValue(TaskQueryError):
    """Raised when a date slot does not hold a real calendar date."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f"Invalid date: {text!r}")


class QueryError(TaskQueryError):
    """Base class for errors reported against a query."""

    def __init__(self, message: str, statement: Any = None):
        self.message = message
        self.statement = statement
        super().__init__(message)

    @property
    def line(self) -> str | None:
        """The instruction text the error belongs to, if any."""
        if self.statement is None:
            return None
        return self.statement.raw_instruction

    def __str__(self) -> str:
        if self.statement is None:
            return self.message
        return f"{self.message}\nProblem line: \"{self.statement.raw_instruction}\""


class QueryParseError(QueryError):
    """Raised when an instruction line is not recognised or is malformed."""

    pass


class FilterParseError(QueryParseError):
    """Raised when a filter line cannot be compiled into a predicate."""

    pass


class PlaceholderResolutionError(QueryParseError):
    """Raised when a ``{{...}}`` placeholder cannot be expanded."""

    pass


class QuerySyntaxError(QueryError):
    """Raised when an expression has invalid syntax."""

    def __init__(self, message: str, column: int | None = None):
        self.column = column
        location = f" at column {column}" if column is not None else ""
        super().__init__(f"{message}{location}")


class QueryExecutionError(QueryError):
    """Raised when an expression cannot be evaluated for a task."""

    pass


class RecurrenceError(TaskQueryError):
    """Base class for recurrence failures."""

    pass


class RecurrenceRuleError(RecurrenceError):
    """Raised when recurrence rule text cannot be parsed."""

    def __init__(self, text: str, reason: str = "unrecognised recurrence rule"):
        self.text = text
        super().__init__(f"{reason}: {text!r}")


class NoValidReferenceDate(RecurrenceError):
    """Raised when the highest-priority date of an occurrence is not a real date."""

    pass
