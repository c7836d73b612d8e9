"""
Compiled filters.
"""

from dataclasses import dataclass, field
from typing import Callable

from task_query.models import Task
from task_query.query.search_info import SearchInfo

Predicate = Callable[[Task, SearchInfo], bool]


@dataclass(frozen=True)
class Filter:
    """A predicate compiled from one filter instruction.

    Attributes:
        instruction: The instruction text the filter was built from
        predicate: Function deciding whether a task matches
        explanation: Human-readable description of what the filter does
        children: Sub-filters, for boolean combinations
    """

    instruction: str
    predicate: Predicate
    explanation: str
    children: tuple["Filter", ...] = field(default=())

    def matches(self, task: Task, search_info: SearchInfo) -> bool:
        return bool(self.predicate(task, search_info))

    def explain(self, indent: str = "") -> str:
        lines = [f"{indent}{self.explanation}"]
        for child in self.children:
            lines.append(child.explain(indent + "  "))
        return "\n".join(lines)
