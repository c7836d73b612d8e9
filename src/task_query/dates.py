"""
Date values and date expressions.

Task dates come from text and may name days that do not exist (``2022-02-30``).
Those are kept as :class:`InvalidDate` so filters and recurrence can tell them
apart from absent dates.
"""

import re
from dataclasses import dataclass
from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from task_query.errors import InvalidDateValue

ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class InvalidDate:
    """A date slot whose text is not a real calendar day."""

    text: str

    def __str__(self) -> str:
        return self.text


DateValue = date | InvalidDate | None


def parse_date(text: str | None) -> DateValue:
    """Parse ``YYYY-MM-DD`` text.

    Returns None for empty input, an :class:`InvalidDate` when the text has the
    right shape but names a non-existent day.

    Raises:
        InvalidDateValue: If the text is not shaped like an ISO date at all
    """
    if text is None or not text.strip():
        return None
    text = text.strip()
    match = ISO_DATE.match(text)
    if not match:
        raise InvalidDateValue(text)
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return InvalidDate(text)


def is_valid(value: DateValue) -> bool:
    return isinstance(value, date)


def require_date(value: DateValue) -> date:
    """Return the value as a real date or raise :class:`InvalidDateValue`."""
    if isinstance(value, date):
        return value
    raise InvalidDateValue(str(value))


def format_date(value: DateValue) -> str:
    if value is None:
        return ""
    if isinstance(value, InvalidDate):
        return value.text
    return value.isoformat()


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of days a date expression stands for."""

    start: date
    end: date

    @classmethod
    def single(cls, day: date) -> "DateRange":
        return cls(day, day)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return self.start.isoformat()
        return f"{self.start.isoformat()} {self.end.isoformat()}"


UNIT_DELTAS = {
    "day": lambda n: relativedelta(days=n),
    "week": lambda n: relativedelta(weeks=n),
    "month": lambda n: relativedelta(months=n),
    "year": lambda n: relativedelta(years=n),
}

RANGE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})\s+(\d{4}-\d{2}-\d{2})$")
PERIOD_PATTERN = re.compile(r"^(last|this|next)\s+(week|month|quarter|year)$")
IN_PATTERN = re.compile(r"^in\s+(\d+)\s+(day|week|month|year)s?$")
AGO_PATTERN = re.compile(r"^(\d+)\s+(day|week|month|year)s?\s+ago$")


def _period(kind: str, offset: int, today: date) -> DateRange:
    if kind == "week":
        monday = today - timedelta(days=today.weekday()) + timedelta(weeks=offset)
        return DateRange(monday, monday + timedelta(days=6))
    if kind == "month":
        first = today.replace(day=1) + relativedelta(months=offset)
        return DateRange(first, first + relativedelta(months=1, days=-1))
    if kind == "quarter":
        quarter_month = 3 * ((today.month - 1) // 3) + 1
        first = today.replace(month=quarter_month, day=1) + relativedelta(months=3 * offset)
        return DateRange(first, first + relativedelta(months=3, days=-1))
    first = date(today.year + offset, 1, 1)
    return DateRange(first, date(first.year, 12, 31))


def parse_date_expression(text: str, today: date) -> DateRange | None:
    """Resolve a date expression relative to ``today``.

    Supports ``today``, ``tomorrow``, ``yesterday``, ISO dates, ISO date pairs,
    ``last/this/next week|month|quarter|year``, ``in N days`` and ``N days ago``.
    Returns None when the text is not a date expression or names an invalid day.
    """
    text = " ".join(text.strip().lower().split())

    if text == "today":
        return DateRange.single(today)
    if text == "tomorrow":
        return DateRange.single(today + timedelta(days=1))
    if text == "yesterday":
        return DateRange.single(today - timedelta(days=1))

    if ISO_DATE.match(text):
        value = parse_date(text)
        return DateRange.single(value) if isinstance(value, date) else None

    if match := RANGE_PATTERN.match(text):
        first, last = parse_date(match.group(1)), parse_date(match.group(2))
        if not (isinstance(first, date) and isinstance(last, date)):
            return None
        return DateRange(min(first, last), max(first, last))

    try:
        if match := PERIOD_PATTERN.match(text):
            offset = {"last": -1, "this": 0, "next": 1}[match.group(1)]
            return _period(match.group(2), offset, today)

        if match := IN_PATTERN.match(text):
            return DateRange.single(today + UNIT_DELTAS[match.group(2)](int(match.group(1))))

        if match := AGO_PATTERN.match(text):
            return DateRange.single(today - UNIT_DELTAS[match.group(2)](int(match.group(1))))
    except (ValueError, OverflowError):
        # Past the end of the calendar
        return None

    return None
