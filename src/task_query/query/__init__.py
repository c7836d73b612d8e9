"""Task query language: compilation and evaluation."""

from task_query.query.filters import Filter, parse_filter
from task_query.query.grouping import Grouper, parse_grouper
from task_query.query.query import Query
from task_query.query.results import QueryResult, QueryState, TaskGroup
from task_query.query.search_info import SearchInfo
from task_query.query.sorting import Sorter, parse_sorter, reversed_comparator
from task_query.query.statement import Statement, split_statements

__all__ = [
    "Filter",
    "Grouper",
    "Query",
    "QueryResult",
    "QueryState",
    "SearchInfo",
    "Sorter",
    "Statement",
    "TaskGroup",
    "parse_filter",
    "parse_grouper",
    "parse_sorter",
    "reversed_comparator",
    "split_statements",
]
