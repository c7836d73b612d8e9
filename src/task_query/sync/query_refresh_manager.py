"""Keeps a query's result current as tasks change and days roll over."""

import asyncio
import inspect
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from task_query.config import TaskQueryConfig, get_config
from task_query.models import TasksFile
from task_query.query.query import Query
from task_query.query.results import QueryResult
from task_query.sync.change_feed import CacheState, ChangeFeed, TaskSnapshot


@dataclass(frozen=True)
class CachedResult:
    """What a query currently shows.

    ``result`` is None until the task collection is warm.
    """

    cache_state: CacheState
    result: QueryResult | None = None


ResultCallback = Callable[[CachedResult], Optional[Awaitable[None]]]


def seconds_until_midnight(now: datetime) -> float:
    next_midnight = datetime.combine(now.date() + timedelta(days=1), time(), tzinfo=now.tzinfo)
    return (next_midnight - now).total_seconds()


class QueryResultCache:
    """Re-evaluates one query whenever the task collection changes.

    This class implements the refresh strategy for a rendered query:
    1. Evaluate once immediately on start
    2. Debounce change notifications, then evaluate against the latest snapshot
    3. Re-compile and re-evaluate shortly after each local midnight, so
       relative dates such as "today" roll over

    Notifications arriving while an evaluation is running are not lost: the
    newest snapshot is evaluated as soon as the current evaluation finishes.
    """

    def __init__(
        self,
        source: str,
        tasks_file: TasksFile | None,
        feed: ChangeFeed,
        on_result: ResultCallback,
        config: TaskQueryConfig | None = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the cache.

        Args:
            source: Query text
            tasks_file: File containing the query
            feed: Source of task snapshots and change notifications
            on_result: Called, or awaited if it returns an awaitable, with each new result
            config: Settings; defaults to the process-wide config
            now: Clock, injectable for tests
        """
        self.source = source
        self.tasks_file = tasks_file
        self.feed = feed
        self.on_result = on_result
        self.config = config or get_config()
        self._now = now

        self.query = self._compile()
        self.result: CachedResult | None = None
        self.refresh_count = 0

        self._handle: Any = None
        self._pending: TaskSnapshot | None = None
        self._draining = False
        self._stopped = False
        self._lock = asyncio.Lock()
        self._debounce_task: Optional[asyncio.Task] = None
        self._midnight_timer: Optional[asyncio.TimerHandle] = None

    def _compile(self) -> Query:
        return Query(
            self.source,
            self.tasks_file,
            today=self._now().date(),
            global_query=self.config.global_query,
        )

    async def start(self):
        """Subscribe to changes, evaluate now and arm the midnight timer."""
        self._handle = self.feed.on_update(self._on_update)
        self.feed.request_update(self._on_requested)
        # The feed may answer synchronously; if so, finish that first evaluation now
        if self._debounce_task is not None:
            await self._debounce_task
        self._arm_midnight_timer()

    async def stop(self):
        """Unsubscribe and cancel pending work. Later notifications are ignored."""
        self._stopped = True
        if self._handle is not None:
            self.feed.unsubscribe(self._handle)
            self._handle = None

        if self._midnight_timer is not None:
            self._midnight_timer.cancel()
            self._midnight_timer = None

        task = self._debounce_task
        if task and not task.done() and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.debug(f"Stopped query cache for {self._describe()}")

    @property
    def is_running(self) -> bool:
        return self._handle is not None and not self._stopped

    def set_tasks_file(self, tasks_file: TasksFile | None) -> bool:
        """Point the query at a renamed or edited file.

        Re-compiles and re-evaluates only if the path or properties changed.

        Returns:
            True if the query was re-compiled
        """
        current = self.tasks_file
        if current is None and tasks_file is None:
            return False
        if current is not None and tasks_file is not None and current.identical_to(tasks_file):
            return False

        self.tasks_file = tasks_file
        self.query = self._compile()
        logger.debug(f"Query file changed, re-compiled query for {self._describe()}")
        if not self._stopped:
            self.feed.request_update(self._on_requested)
        return True

    def _on_update(self, snapshot: TaskSnapshot):
        """Called by the feed when tasks change. Triggers debounced refresh."""
        self._schedule(snapshot, self.config.refresh_debounce_seconds)

    def _on_requested(self, snapshot: TaskSnapshot):
        self._schedule(snapshot, 0)

    def _schedule(self, snapshot: TaskSnapshot, delay: float):
        if self._stopped:
            return
        self._pending = snapshot

        # A running evaluation picks up the pending snapshot when it finishes
        if self._draining:
            return

        # Cancel existing debounce task
        if self._debounce_task and not self._debounce_task.done():
            self._debounce_task.cancel()

        # Start new debounce
        self._debounce_task = asyncio.create_task(self._debounced_refresh(delay))

    async def _debounced_refresh(self, delay: float):
        """Wait for the debounce period then evaluate the latest snapshot."""
        try:
            if delay > 0:
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            return
        await self._drain()

    async def _drain(self):
        async with self._lock:
            self._draining = True
            try:
                while self._pending is not None and not self._stopped:
                    snapshot, self._pending = self._pending, None
                    await self._publish(self._evaluate(snapshot))
            finally:
                self._draining = False

    def _evaluate(self, snapshot: TaskSnapshot) -> CachedResult:
        if snapshot.state is not CacheState.WARM:
            logger.debug(f"Task collection is {snapshot.state.value}, not evaluating {self._describe()}")
            return CachedResult(snapshot.state)
        return CachedResult(snapshot.state, self.query.evaluate(snapshot.tasks))

    async def _publish(self, cached: CachedResult):
        self.result = cached
        self.refresh_count += 1
        try:
            outcome = self.on_result(cached)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"Error delivering query result for {self._describe()}: {e}")

    def _arm_midnight_timer(self):
        if self._stopped:
            return
        delay = seconds_until_midnight(self._now()) + self.config.midnight_buffer_seconds
        loop = asyncio.get_running_loop()
        self._midnight_timer = loop.call_later(delay, self._on_midnight)
        logger.debug(f"Next midnight refresh in {delay:.1f}s for {self._describe()}")

    def _on_midnight(self):
        self._midnight_timer = None
        if self._stopped:
            return
        logger.info(f"Midnight refresh for {self._describe()}")
        self.query = self._compile()
        self.feed.request_update(self._on_requested)
        self._arm_midnight_timer()

    def _describe(self) -> str:
        return f"query in {self.tasks_file.path}" if self.tasks_file else "query"
