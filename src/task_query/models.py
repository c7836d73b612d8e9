"""
Task records and the files they live in.

Tasks are immutable; editing operations return new instances.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from task_query.dates import DateValue

if TYPE_CHECKING:
    from task_query.recurrence.recurrence import Recurrence


class StatusType(Enum):
    """Kind of a status, independent of its symbol."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    DONE = "DONE"
    CANCELLED = "CANCELLED"
    NON_TASK = "NON_TASK"

    @property
    def is_completed(self) -> bool:
        return self in (StatusType.DONE, StatusType.CANCELLED, StatusType.NON_TASK)


@dataclass(frozen=True)
class Status:
    """A checkbox status such as ``[ ]`` or ``[x]``."""

    symbol: str
    name: str
    type: StatusType
    next_symbol: str

    @property
    def is_completed(self) -> bool:
        return self.type.is_completed


STATUSES = {
    " ": Status(" ", "Todo", StatusType.TODO, "x"),
    "x": Status("x", "Done", StatusType.DONE, " "),
    "X": Status("X", "Done", StatusType.DONE, " "),
    "/": Status("/", "In Progress", StatusType.IN_PROGRESS, "x"),
    "-": Status("-", "Cancelled", StatusType.CANCELLED, " "),
    "h": Status("h", "On Hold", StatusType.ON_HOLD, "x"),
    "Q": Status("Q", "Non-task", StatusType.NON_TASK, " "),
}

TODO = STATUSES[" "]
DONE = STATUSES["x"]


def status_for_symbol(symbol: str) -> Status:
    """Look up a status, treating unknown symbols as Todo-like."""
    if symbol in STATUSES:
        return STATUSES[symbol]
    return Status(symbol, "Unknown", StatusType.TODO, "x")


class Priority(Enum):
    """Task priority. Ordered from most to least urgent; NONE is lowest."""

    HIGHEST = 0
    HIGH = 1
    MEDIUM = 2
    LOW = 3
    LOWEST = 4
    NONE = 5

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_name(cls, name: str) -> "Priority":
        return cls[name.strip().upper()]


@dataclass(frozen=True)
class TasksFile:
    """A markdown file and its frontmatter properties."""

    path: str
    frontmatter: dict[str, Any] = field(default_factory=dict, hash=False, compare=True)

    @property
    def folder(self) -> str:
        parent = str(PurePosixPath(self.path).parent)
        return "/" if parent in ("", ".") else f"{parent}/"

    @property
    def filename(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def filename_without_extension(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def root(self) -> str:
        parts = PurePosixPath(self.path).parts
        return "/" if len(parts) <= 1 else f"{parts[0]}/"

    def has_property(self, name: str) -> bool:
        return self._find_key(name) is not None

    def get_property(self, name: str) -> Any:
        """Frontmatter value for ``name`` (case-insensitive), or None."""
        key = self._find_key(name)
        return None if key is None else self.frontmatter[key]

    def identical_to(self, other: "TasksFile") -> bool:
        return self.path == other.path and self.frontmatter == other.frontmatter

    def _find_key(self, name: str) -> str | None:
        wanted = name.lower()
        for key in self.frontmatter:
            if str(key).lower() == wanted:
                return key
        return None


@dataclass(frozen=True)
class TaskLocation:
    """Where a task line sits in the vault."""

    path: str
    line_number: int
    preceding_header: str | None = None


@dataclass(frozen=True)
class Task:
    """A single task line."""

    location: TaskLocation
    description: str
    status: Status = TODO
    priority: Priority = Priority.NONE
    start_date: DateValue = None
    scheduled_date: DateValue = None
    due_date: DateValue = None
    created_date: DateValue = None
    done_date: DateValue = None
    recurrence: "Recurrence | None" = None
    tags: tuple[str, ...] = ()
    id: str = ""
    depends_on: tuple[str, ...] = ()
    original_markdown: str = ""
    tasks_file: TasksFile | None = None

    @property
    def path(self) -> str:
        return self.location.path

    @property
    def file(self) -> TasksFile:
        return self.tasks_file or TasksFile(self.location.path)

    @property
    def is_done(self) -> bool:
        return self.status.is_completed

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def heading(self) -> str | None:
        return self.location.preceding_header

    @property
    def recurrence_rule(self) -> str:
        return self.recurrence.to_text() if self.recurrence else ""

    def with_changes(self, **changes: Any) -> "Task":
        return replace(self, **changes)
