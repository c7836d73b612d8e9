"""
A single point in a recurrence timeline.
"""

from dataclasses import dataclass
from datetime import date

from task_query.dates import DateValue, InvalidDate, format_date
from task_query.errors import NoValidReferenceDate


@dataclass(frozen=True)
class Occurrence:
    """The start, scheduled and due dates of one instance of a recurring task.

    Each slot may be absent (None), a real date, or an :class:`InvalidDate`.
    """

    start_date: DateValue = None
    scheduled_date: DateValue = None
    due_date: DateValue = None

    @property
    def reference_date(self) -> date | None:
        """The first present date in priority order due, scheduled, start.

        Returns None if no slot is set.

        Raises:
            NoValidReferenceDate: If the highest-priority present slot is invalid
        """
        for value in (self.due_date, self.scheduled_date, self.start_date):
            if value is None:
                continue
            if isinstance(value, InvalidDate):
                raise NoValidReferenceDate(f"Reference date {value.text!r} is not a valid date")
            return value
        return None

    @property
    def present_slots(self) -> int:
        return sum(value is not None for value in (self.start_date, self.scheduled_date, self.due_date))

    def is_identical_to(self, other: "Occurrence") -> bool:
        return (
            self.start_date == other.start_date
            and self.scheduled_date == other.scheduled_date
            and self.due_date == other.due_date
        )

    def next(self, next_reference_date: date, remove_scheduled_date: bool = False) -> "Occurrence":
        """Shift every present slot so it keeps its offset from the reference date.

        Invalid slots take the new reference date. With ``remove_scheduled_date``
        the scheduled slot is dropped, unless it is the only slot present.
        """
        reference = self.reference_date

        def shift(value: DateValue) -> date | None:
            if value is None:
                return None
            if isinstance(value, InvalidDate) or reference is None:
                return next_reference_date
            return next_reference_date + (value - reference)

        scheduled = shift(self.scheduled_date)
        if remove_scheduled_date and self.present_slots > 1:
            scheduled = None

        return Occurrence(
            start_date=shift(self.start_date),
            scheduled_date=scheduled,
            due_date=shift(self.due_date),
        )

    def __str__(self) -> str:
        return (
            f"start={format_date(self.start_date) or '-'} "
            f"scheduled={format_date(self.scheduled_date) or '-'} "
            f"due={format_date(self.due_date) or '-'}"
        )
