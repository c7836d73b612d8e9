"""
Classification of query lines into instruction variants.

Each variant carries its compiled payload, so the evaluation pipeline never
looks at instruction text again.
"""

import re
from dataclasses import dataclass
from datetime import date

from task_query.errors import QueryParseError
from task_query.query.filters import Filter, parse_filter
from task_query.query.grouping import Grouper, parse_grouper
from task_query.query.sorting import Sorter, parse_sorter
from task_query.query.statement import Statement

EXPLAIN = re.compile(r"^explain$", re.IGNORECASE)
IGNORE_GLOBAL_QUERY = re.compile(r"^ignore\s+global\s+query$", re.IGNORECASE)
LIMIT = re.compile(r"^limit\s+(groups\s+)?(?:to\s+)?(\d+)(?:\s+tasks?)?$", re.IGNORECASE)
LAYOUT = re.compile(r"^(?:(?:hide|show)\s+.+|short\s+mode|short|full\s+mode|full)$", re.IGNORECASE)
SORT = re.compile(r"^sort\s+by\b", re.IGNORECASE)
GROUP = re.compile(r"^group\s+by\b", re.IGNORECASE)


@dataclass(frozen=True)
class FilterInstruction:
    statement: Statement
    filter: Filter


@dataclass(frozen=True)
class SortInstruction:
    statement: Statement
    sorter: Sorter


@dataclass(frozen=True)
class GroupInstruction:
    statement: Statement
    grouper: Grouper


@dataclass(frozen=True)
class LimitInstruction:
    statement: Statement
    count: int
    per_group: bool = False


@dataclass(frozen=True)
class LayoutInstruction:
    """Display option; recorded but does not change results."""

    statement: Statement
    option: str


@dataclass(frozen=True)
class ExplainInstruction:
    statement: Statement


@dataclass(frozen=True)
class IgnoreGlobalQueryInstruction:
    statement: Statement


Instruction = (
    FilterInstruction
    | SortInstruction
    | GroupInstruction
    | LimitInstruction
    | LayoutInstruction
    | ExplainInstruction
    | IgnoreGlobalQueryInstruction
)


def is_ignore_global_query(line: str) -> bool:
    return bool(IGNORE_GLOBAL_QUERY.match(line.strip()))


def classify(statement: Statement, today: date) -> Instruction:
    """Compile a statement into its instruction variant.

    Args:
        statement: Statement with placeholders already expanded
        today: Day that relative dates in filters resolve against

    Raises:
        QueryParseError: If the line is not a valid instruction
    """
    line = statement.any_placeholders_expanded.strip()

    if EXPLAIN.match(line):
        return ExplainInstruction(statement)

    if IGNORE_GLOBAL_QUERY.match(line):
        return IgnoreGlobalQueryInstruction(statement)

    if line.lower().startswith("limit"):
        match = LIMIT.match(line)
        if not match:
            raise QueryParseError(f"do not understand query limit: {line}")
        return LimitInstruction(statement, int(match.group(2)), per_group=bool(match.group(1)))

    if SORT.match(line):
        return SortInstruction(statement, parse_sorter(line))

    if GROUP.match(line):
        return GroupInstruction(statement, parse_grouper(line))

    if LAYOUT.match(line):
        return LayoutInstruction(statement, " ".join(line.lower().split()))

    return FilterInstruction(statement, parse_filter(line, today))
