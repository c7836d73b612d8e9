"""
Query compilation and evaluation.

A query compiles once, then evaluates against any number of task
snapshots::

    query = Query("not done\\ndue before tomorrow\\nsort by priority", tasks_file)
    result = query.evaluate(tasks)

Lines that fail to compile are reported in ``Query.errors`` and every
result, while the remaining lines still take effect.
"""

from datetime import date

from loguru import logger

from task_query.errors import QueryError, QueryParseError
from task_query.models import Task, TasksFile
from task_query.query.filters import Filter
from task_query.query.grouping import Grouper, apply_limits, partition
from task_query.query.instructions import (
    ExplainInstruction,
    FilterInstruction,
    GroupInstruction,
    IgnoreGlobalQueryInstruction,
    Instruction,
    LayoutInstruction,
    LimitInstruction,
    SortInstruction,
    classify,
    is_ignore_global_query,
)
from task_query.query.placeholders import expand_placeholders
from task_query.query.results import QueryResult, QueryState
from task_query.query.search_info import SearchInfo
from task_query.query.sorting import Sorter, sort_tasks
from task_query.query.statement import Statement, split_statements


class Query:
    """A compiled query.

    Args:
        source: Query text, one instruction per line
        tasks_file: File containing the query, for placeholders and ``query.file`` fields
        today: Day relative dates resolve against; defaults to the current date
        global_query: Instructions prepended unless the query says ``ignore global query``
    """

    def __init__(
        self,
        source: str,
        tasks_file: TasksFile | None = None,
        *,
        today: date | None = None,
        global_query: str = "",
    ):
        self.source = source
        self.tasks_file = tasks_file
        self.today = today or date.today()
        self.global_query = global_query

        self.state = QueryState.IDLE
        self.instructions: list[Instruction] = []
        self.errors: list[QueryError] = []

        self._compile()

    @property
    def filters(self) -> list[Filter]:
        return [i.filter for i in self.instructions if isinstance(i, FilterInstruction)]

    @property
    def sorters(self) -> list[Sorter]:
        return [i.sorter for i in self.instructions if isinstance(i, SortInstruction)]

    @property
    def groupers(self) -> list[Grouper]:
        return [i.grouper for i in self.instructions if isinstance(i, GroupInstruction)]

    @property
    def limit(self) -> int | None:
        limits = [i.count for i in self.instructions if isinstance(i, LimitInstruction) and not i.per_group]
        return limits[-1] if limits else None

    @property
    def group_limit(self) -> int | None:
        limits = [i.count for i in self.instructions if isinstance(i, LimitInstruction) and i.per_group]
        return limits[-1] if limits else None

    @property
    def layout(self) -> list[str]:
        return [i.option for i in self.instructions if isinstance(i, LayoutInstruction)]

    @property
    def explain_requested(self) -> bool:
        return any(isinstance(i, ExplainInstruction) for i in self.instructions)

    @property
    def ignores_global_query(self) -> bool:
        return any(isinstance(i, IgnoreGlobalQueryInstruction) for i in self.instructions)

    def _statements(self) -> list[Statement]:
        statements = split_statements(self.source)
        if not self.global_query.strip():
            return statements
        if any(is_ignore_global_query(s.raw_instruction) for s in statements):
            return statements
        return split_statements(self.global_query) + statements

    def _compile(self) -> None:
        self.state = QueryState.PARSING
        statements = self._statements()

        for statement in statements:
            try:
                expanded = expand_placeholders(statement, self.tasks_file)
                self.instructions.append(classify(expanded, self.today))
            except QueryParseError as e:
                if e.statement is None:
                    e.statement = statement
                logger.warning(f"Query line skipped: {e}")
                self.errors.append(e)

        if self.errors and not self.instructions:
            self.state = QueryState.ERROR
        else:
            self.state = QueryState.COMPILED

        logger.debug(
            f"Compiled query: {len(statements)} statements, "
            f"{len(self.instructions)} instructions, {len(self.errors)} errors"
        )

    def evaluate(self, tasks: list[Task] | tuple[Task, ...]) -> QueryResult:
        """Filter, sort, group and limit ``tasks``.

        Evaluation does not modify the query; the same query gives the same
        result for the same tasks.
        """
        if self.state is QueryState.ERROR:
            return QueryResult(
                errors=tuple(self.errors),
                explanation=self.explain() if self.explain_requested else "",
                state=QueryState.ERROR,
            )

        self.state = QueryState.EVALUATING
        search_info = SearchInfo.from_tasks(tasks, self.tasks_file, self.today)

        filters = self.filters
        matched = [task for task in tasks if all(f.matches(task, search_info) for f in filters)]
        ordered = sort_tasks(matched, self.sorters, search_info)
        groups = partition(ordered, self.groupers, search_info)
        groups = apply_limits(groups, self.limit, self.group_limit)

        result = QueryResult(
            groups=tuple(groups),
            errors=tuple(self.errors),
            total_matched=len(matched),
            explanation=self.explain() if self.explain_requested else "",
            state=QueryState.RENDERED,
            layout=tuple(self.layout),
        )
        self.state = QueryState.RENDERED

        logger.debug(
            f"Evaluated query over {len(tasks)} tasks: {len(matched)} matched, "
            f"{result.task_count} shown in {len(groups)} groups"
        )
        return result

    def explain(self) -> str:
        """Describe what the query does, one section per instruction kind."""
        lines: list[str] = []

        if self.global_query.strip() and not self.ignores_global_query:
            lines.append("Explanation of the global query and this query:")
            lines.append("")

        filters = [i for i in self.instructions if isinstance(i, FilterInstruction)]
        if filters:
            for instruction in filters:
                lines.append(instruction.statement.explain())
                if instruction.filter.explanation != instruction.statement.any_placeholders_expanded:
                    lines.append(instruction.filter.explain("  "))
                lines.append("")
        else:
            lines.append("No filters supplied. All tasks will match the query.")
            lines.append("")

        for sorter in self.sorters:
            lines.append(f"{sorter.instruction}")
        for grouper in self.groupers:
            lines.append(f"{grouper.instruction}")
        if self.limit is not None:
            lines.append(f"At most {self.limit} task{'s' if self.limit != 1 else ''}.")
        if self.group_limit is not None:
            lines.append(f"At most {self.group_limit} task{'s' if self.group_limit != 1 else ''} per group.")

        for error in self.errors:
            lines.append(f"Error: {error}")

        return "\n".join(lines).rstrip()
