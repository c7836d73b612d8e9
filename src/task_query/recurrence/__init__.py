"""
Recurrence rules and next-occurrence calculation.
"""

from task_query.recurrence.occurrence import Occurrence
from task_query.recurrence.recurrence import Recurrence, next_occurrence
from task_query.recurrence.rule import RecurrenceRule, RecurrenceUnit

__all__ = [
    "Occurrence",
    "Recurrence",
    "RecurrenceRule",
    "RecurrenceUnit",
    "next_occurrence",
]
