"""
Recurrence rule parsing.

Grammar (case-insensitive)::

    every [N|other] (day|week|month|year)[s] [on <weekday>] [when done]
    every <weekday> [when done]
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from dateutil.relativedelta import MO, TU, WE, TH, FR, SA, SU, relativedelta

from task_query.errors import RecurrenceRuleError


class RecurrenceUnit(Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
WEEKDAY_CONSTANTS = (MO, TU, WE, TH, FR, SA, SU)

WHEN_DONE = re.compile(r"\s+when\s+done$", re.IGNORECASE)
INTERVAL_RULE = re.compile(
    r"^every\s+(?:(?P<count>\d+|other)\s+)?(?P<unit>day|week|month|year)s?"
    r"(?:\s+on\s+(?:a\s+)?(?P<weekday>" + "|".join(WEEKDAYS) + r"))?$",
    re.IGNORECASE,
)
WEEKDAY_RULE = re.compile(r"^every\s+(?P<weekday>" + "|".join(WEEKDAYS) + r")$", re.IGNORECASE)


@dataclass(frozen=True)
class RecurrenceRule:
    """A parsed recurrence rule.

    ``text`` is the rule as written, without any ``when done`` suffix.
    """

    text: str
    interval: int
    unit: RecurrenceUnit
    weekday: int | None = None
    when_done: bool = False

    @classmethod
    def parse(cls, rule_text: str) -> "RecurrenceRule":
        """Parse rule text.

        Raises:
            RecurrenceRuleError: If the text does not follow the rule grammar
        """
        text = " ".join(rule_text.strip().split())
        when_done = False
        if match := WHEN_DONE.search(text):
            when_done = True
            text = text[: match.start()]

        if match := WEEKDAY_RULE.match(text):
            return cls(
                text=text,
                interval=1,
                unit=RecurrenceUnit.WEEK,
                weekday=WEEKDAYS.index(match.group("weekday").lower()),
                when_done=when_done,
            )

        match = INTERVAL_RULE.match(text)
        if not match:
            raise RecurrenceRuleError(rule_text)

        count = match.group("count")
        if count is None:
            interval = 1
        elif count.lower() == "other":
            interval = 2
        else:
            interval = int(count)
        if interval < 1:
            raise RecurrenceRuleError(rule_text, "interval must be at least 1")

        weekday = match.group("weekday")
        return cls(
            text=text,
            interval=interval,
            unit=RecurrenceUnit(match.group("unit").lower()),
            weekday=WEEKDAYS.index(weekday.lower()) if weekday else None,
            when_done=when_done,
        )

    def to_text(self) -> str:
        return f"{self.text} when done" if self.when_done else self.text

    def delta(self) -> relativedelta:
        """The offset from one reference date to the next.

        relativedelta clamps month and year steps to the last day of the
        target month, so Jan 31 + 1 month is the end of February.
        """
        step = {
            RecurrenceUnit.DAY: relativedelta(days=self.interval),
            RecurrenceUnit.WEEK: relativedelta(weeks=self.interval),
            RecurrenceUnit.MONTH: relativedelta(months=self.interval),
            RecurrenceUnit.YEAR: relativedelta(years=self.interval),
        }[self.unit]
        if self.weekday is not None:
            step += relativedelta(weekday=WEEKDAY_CONSTANTS[self.weekday])
        return step

    def advance(self, reference: date) -> date:
        return reference + self.delta()
