"""Filter instructions compiled into task predicates."""

from task_query.query.filters.factory import parse_filter
from task_query.query.filters.filter import Filter, Predicate

__all__ = ["Filter", "Predicate", "parse_filter"]
