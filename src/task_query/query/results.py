"""
Results of evaluating a query.
"""

from dataclasses import dataclass, field
from enum import Enum

from task_query.errors import QueryError
from task_query.models import Task


class QueryState(Enum):
    """Lifecycle of a query."""

    IDLE = "idle"
    PARSING = "parsing"
    COMPILED = "compiled"
    ERROR = "error"
    EVALUATING = "evaluating"
    RENDERED = "rendered"


@dataclass(frozen=True)
class TaskGroup:
    """Tasks sharing one group name per grouping level.

    ``names`` is empty when the query has no ``group by`` instruction.
    """

    names: tuple[str, ...]
    tasks: tuple[Task, ...]

    @property
    def heading(self) -> str:
        return " > ".join(name for name in self.names if name)


@dataclass(frozen=True)
class QueryResult:
    """Ordered, grouped tasks plus the errors found while compiling the query."""

    groups: tuple[TaskGroup, ...] = ()
    errors: tuple[QueryError, ...] = ()
    total_matched: int = 0
    explanation: str = ""
    state: QueryState = QueryState.RENDERED
    layout: tuple[str, ...] = field(default=())

    @property
    def tasks(self) -> list[Task]:
        """Every placement in group order; a task in two groups appears twice."""
        return [task for group in self.groups for task in group.tasks]

    @property
    def task_count(self) -> int:
        return sum(len(group.tasks) for group in self.groups)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
