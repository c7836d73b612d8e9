"""
Per-evaluation context shared by filters, sorters and groupers.
"""

from dataclasses import dataclass, field
from datetime import date

from task_query.models import Task, TasksFile


@dataclass(frozen=True)
class SearchInfo:
    """Read-only view of the tasks being searched and the query's origin.

    The lookup tables are built once at construction, so predicates and
    comparators see the same answers for the whole evaluation pass.
    """

    all_tasks: tuple[Task, ...]
    tasks_file: TasksFile | None = None
    today: date = field(default_factory=date.today)
    _by_id: dict[str, tuple[Task, ...]] = field(init=False, repr=False, compare=False)
    _dependents: dict[str, tuple[Task, ...]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_id: dict[str, list[Task]] = {}
        dependents: dict[str, list[Task]] = {}
        for task in self.all_tasks:
            if task.id:
                by_id.setdefault(task.id, []).append(task)
            for dependency in task.depends_on:
                dependents.setdefault(dependency, []).append(task)

        object.__setattr__(self, "_by_id", {k: tuple(v) for k, v in by_id.items()})
        object.__setattr__(self, "_dependents", {k: tuple(v) for k, v in dependents.items()})

    @classmethod
    def from_tasks(cls, tasks: list[Task] | tuple[Task, ...], tasks_file: TasksFile | None = None,
                   today: date | None = None) -> "SearchInfo":
        return cls(tuple(tasks), tasks_file, today or date.today())

    def tasks_with_id(self, task_id: str) -> tuple[Task, ...]:
        return self._by_id.get(task_id, ())

    def dependents_of(self, task: Task) -> tuple[Task, ...]:
        if not task.id:
            return ()
        return self._dependents.get(task.id, ())

    def is_blocked(self, task: Task) -> bool:
        """An open task waiting on at least one open dependency."""
        if task.is_done:
            return False
        return any(
            not dependency.is_done
            for task_id in task.depends_on
            for dependency in self.tasks_with_id(task_id)
        )

    def is_blocking(self, task: Task) -> bool:
        """An open task that at least one open task depends on."""
        if task.is_done:
            return False
        return any(not dependent.is_done for dependent in self.dependents_of(task))
