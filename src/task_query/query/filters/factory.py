"""
Chooses the filter field that owns an instruction line.
"""

from datetime import date

from task_query.errors import FilterParseError
from task_query.query.filters.boolean import BooleanField
from task_query.query.filters.date_field import DateField
from task_query.query.filters.field import FilterField
from task_query.query.filters.filter import Filter
from task_query.query.filters.function import FunctionField
from task_query.query.filters.status import (
    DependencyField,
    DoneField,
    PriorityField,
    RecurringField,
    StatusTypeField,
)
from task_query.query.filters.text_field import TEXT_GETTERS, TagsField, TextField


def parse_filter(line: str, today: date) -> Filter:
    """Compile one filter instruction.

    Args:
        line: Instruction text, placeholders already expanded
        today: Day that relative date expressions resolve against

    Raises:
        FilterParseError: If no field recognises the line or the line is malformed
    """
    line = line.strip()
    for field in FIELDS:
        if field.can_create_filter_for_line(line):
            return field.create_filter(line, today)
    raise FilterParseError(f"do not understand query: {line}")


# Order matters: "done" is a status filter, "done before today" a date filter
FIELDS: list[FilterField] = [
    BooleanField(parse_filter),
    DoneField(),
    StatusTypeField(),
    PriorityField(),
    RecurringField(),
    DependencyField(),
    TagsField(),
    DateField(),
    *(TextField(name) for name in TEXT_GETTERS),
    FunctionField(),
]
