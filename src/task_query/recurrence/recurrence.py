"""
Recurrence of a task: a rule plus the occurrence it was last attached to.
"""

from dataclasses import dataclass
from datetime import date

from loguru import logger

from task_query.errors import NoValidReferenceDate, RecurrenceRuleError
from task_query.recurrence.occurrence import Occurrence
from task_query.recurrence.rule import RecurrenceRule


@dataclass(frozen=True)
class Recurrence:
    """A recurrence rule bound to the occurrence it recurs from."""

    rule: RecurrenceRule
    occurrence: Occurrence

    @classmethod
    def from_text(cls, rule_text: str, occurrence: Occurrence) -> "Recurrence | None":
        """Build a recurrence from rule text.

        Returns None when the rule cannot be parsed or the occurrence has an
        invalid reference date, in which case the task does not recur.
        """
        try:
            rule = RecurrenceRule.parse(rule_text)
            occurrence.reference_date  # raises on an invalid reference date
        except (RecurrenceRuleError, NoValidReferenceDate) as e:
            logger.debug(f"Cannot build recurrence from {rule_text!r}: {e}")
            return None
        return cls(rule=rule, occurrence=occurrence)

    @property
    def base_on_today(self) -> bool:
        return self.rule.when_done

    def to_text(self) -> str:
        return self.rule.to_text()

    def next(self, today: date | None = None, remove_scheduled_date: bool = False) -> Occurrence | None:
        """Compute the next occurrence.

        Args:
            today: Completion date, used for ``when done`` rules and when the
                occurrence has no dates at all. Defaults to the current date.
            remove_scheduled_date: Drop the scheduled date unless it is the only date

        Returns:
            The next occurrence, or None if there is no valid reference date
            or the next date falls outside the calendar
        """
        today = today or date.today()
        try:
            reference = self.occurrence.reference_date
        except NoValidReferenceDate as e:
            logger.debug(f"No next occurrence for {self.to_text()!r}: {e}")
            return None

        base = today if self.base_on_today or reference is None else reference
        try:
            next_reference = self.rule.advance(base)
            result = self.occurrence.next(next_reference, remove_scheduled_date)
        except (ValueError, OverflowError) as e:
            logger.debug(f"No next occurrence for {self.to_text()!r}: date out of range ({e})")
            return None
        logger.debug(f"Recurrence {self.to_text()!r}: {self.occurrence} -> {result}")
        return result

    def identical_to(self, other: "Recurrence | None") -> bool:
        """True if both have the same rule text, when-done flag and dates."""
        if other is None:
            return False
        return (
            self.rule.text == other.rule.text
            and self.rule.when_done == other.rule.when_done
            and self.occurrence.is_identical_to(other.occurrence)
        )


def next_occurrence(
    occurrence: Occurrence,
    rule: RecurrenceRule | str,
    today: date | None = None,
    remove_scheduled_date: bool = False,
) -> Occurrence | None:
    """Next occurrence of ``occurrence`` under ``rule``, or None if it cannot be computed."""
    if isinstance(rule, str):
        recurrence = Recurrence.from_text(rule, occurrence)
        if recurrence is None:
            return None
    else:
        recurrence = Recurrence(rule=rule, occurrence=occurrence)
    return recurrence.next(today, remove_scheduled_date)
