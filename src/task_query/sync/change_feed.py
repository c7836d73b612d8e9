"""Change notifications for the task collection."""

from dataclasses import dataclass
from enum import Enum
from itertools import count
from typing import Any, Callable, Protocol

from loguru import logger

from task_query.models import Task


class CacheState(Enum):
    """How far the task collection has loaded."""

    COLD = "cold"
    INITIALIZING = "initializing"
    WARM = "warm"


@dataclass(frozen=True)
class TaskSnapshot:
    """Read-only view of every task at one moment."""

    tasks: tuple[Task, ...] = ()
    state: CacheState = CacheState.WARM


UpdateCallback = Callable[[TaskSnapshot], None]


class ChangeFeed(Protocol):
    """Where a query learns about task changes."""

    def request_update(self, callback: UpdateCallback) -> None:
        """Deliver the current snapshot to ``callback``, now or soon."""
        ...

    def on_update(self, callback: UpdateCallback) -> Any:
        """Call ``callback`` with each new snapshot; returns a handle for unsubscribe."""
        ...

    def unsubscribe(self, handle: Any) -> None:
        ...


class InMemoryChangeFeed:
    """A change feed holding its snapshot in memory.

    ``publish`` replaces the snapshot and notifies every subscriber
    synchronously, in subscription order.
    """

    def __init__(self, tasks: list[Task] | tuple[Task, ...] = (), state: CacheState = CacheState.COLD):
        self._snapshot = TaskSnapshot(tuple(tasks), state)
        self._subscribers: dict[int, UpdateCallback] = {}
        self._handles = count(1)

    @property
    def snapshot(self) -> TaskSnapshot:
        return self._snapshot

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def request_update(self, callback: UpdateCallback) -> None:
        callback(self._snapshot)

    def on_update(self, callback: UpdateCallback) -> int:
        handle = next(self._handles)
        self._subscribers[handle] = callback
        return handle

    def unsubscribe(self, handle: int) -> None:
        self._subscribers.pop(handle, None)

    def publish(self, tasks: list[Task] | tuple[Task, ...], state: CacheState = CacheState.WARM) -> None:
        self._snapshot = TaskSnapshot(tuple(tasks), state)
        logger.debug(f"Publishing {len(self._snapshot.tasks)} tasks ({state.value}) to {len(self._subscribers)} subscribers")
        for callback in list(self._subscribers.values()):
            callback(self._snapshot)
