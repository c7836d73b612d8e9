"""
Task line parser and serializer.

Reads checklist lines in the emoji signifier format::

    - [ ] Pay rent #home ⏫ 🔁 every month 🛫 2022-01-25 📅 2022-01-31
"""

import re

from task_query.dates import DateValue, format_date, parse_date
from task_query.models import Priority, Task, TaskLocation, TasksFile, status_for_symbol
from task_query.recurrence.occurrence import Occurrence
from task_query.recurrence.recurrence import Recurrence

TASK_PATTERN = re.compile(r"^(\s*(?:[-*+]|\d+[.)])\s+)\[(.)\]\s+(.*)$")
HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
TAG_PATTERN = re.compile(r"(?:^|\s)(#[^\s#,.;:!?'\"()\[\]{}]+)")

VS = "\ufe0f?"
DATE = r"(\d{4}-\d{2}-\d{2})"

PRIORITY_SYMBOLS = {
    "🔺": Priority.HIGHEST,
    "⏫": Priority.HIGH,
    "🔼": Priority.MEDIUM,
    "🔽": Priority.LOW,
    "⏬": Priority.LOWEST,
}

PRIORITY_PATTERN = re.compile(r"\s*(" + "|".join(PRIORITY_SYMBOLS) + ")" + VS + r"$")
DATE_PATTERNS = {
    "created_date": re.compile(r"\s*➕" + VS + r"\s*" + DATE + "$"),
    "start_date": re.compile(r"\s*🛫" + VS + r"\s*" + DATE + "$"),
    "scheduled_date": re.compile(r"\s*[⏳⌛]" + VS + r"\s*" + DATE + "$"),
    "due_date": re.compile(r"\s*[📅📆🗓]" + VS + r"\s*" + DATE + "$"),
    "done_date": re.compile(r"\s*✅" + VS + r"\s*" + DATE + "$"),
}
RECURRENCE_PATTERN = re.compile(r"\s*🔁" + VS + r"\s*([a-zA-Z0-9, !]+)$")
ID_PATTERN = re.compile(r"\s*🆔" + VS + r"\s*([a-zA-Z0-9_-]+)$")
DEPENDS_ON_PATTERN = re.compile(r"\s*⛔" + VS + r"\s*([a-zA-Z0-9_-]+(?:\s*,\s*[a-zA-Z0-9_-]+)*)$")
TRAILING_TAG_PATTERN = re.compile(r"\s+(#[^\s#,.;:!?'\"()\[\]{}]+)$")

# Signifiers are peeled off the end of the line, so a line can hold at most
# one of each plus a handful of trailing tags.
MAX_SIGNIFIER_PASSES = 20


def parse_task_line(
    line: str,
    path: str = "",
    line_number: int = 0,
    preceding_header: str | None = None,
    tasks_file: TasksFile | None = None,
) -> Task | None:
    """Parse one markdown line into a Task, or None if it is not a checklist item."""
    match = TASK_PATTERN.match(line)
    if not match:
        return None
    _, symbol, body = match.groups()

    fields: dict[str, DateValue] = {}
    priority = Priority.NONE
    rule_text: str | None = None
    task_id = ""
    depends_on: tuple[str, ...] = ()
    trailing_tags: list[str] = []

    body = body.rstrip()
    for _ in range(MAX_SIGNIFIER_PASSES):
        matched = False

        if m := PRIORITY_PATTERN.search(body):
            priority = PRIORITY_SYMBOLS[m.group(1)]
            body, matched = body[: m.start()].rstrip(), True

        for name, pattern in DATE_PATTERNS.items():
            if m := pattern.search(body):
                fields[name] = parse_date(m.group(1))
                body, matched = body[: m.start()].rstrip(), True

        if m := RECURRENCE_PATTERN.search(body):
            rule_text = m.group(1).strip()
            body, matched = body[: m.start()].rstrip(), True

        if m := ID_PATTERN.search(body):
            task_id = m.group(1)
            body, matched = body[: m.start()].rstrip(), True

        if m := DEPENDS_ON_PATTERN.search(body):
            depends_on = tuple(part.strip() for part in m.group(1).split(","))
            body, matched = body[: m.start()].rstrip(), True

        if m := TRAILING_TAG_PATTERN.search(body):
            trailing_tags.insert(0, m.group(1))
            body, matched = body[: m.start()].rstrip(), True

        if not matched:
            break

    description = " ".join([body, *trailing_tags]).strip()
    tags = tuple(TAG_PATTERN.findall(description))

    recurrence = None
    if rule_text:
        occurrence = Occurrence(
            start_date=fields.get("start_date"),
            scheduled_date=fields.get("scheduled_date"),
            due_date=fields.get("due_date"),
        )
        recurrence = Recurrence.from_text(rule_text, occurrence)

    return Task(
        location=TaskLocation(path=path, line_number=line_number, preceding_header=preceding_header),
        description=description,
        status=status_for_symbol(symbol),
        priority=priority,
        recurrence=recurrence,
        tags=tags,
        id=task_id,
        depends_on=depends_on,
        original_markdown=line,
        tasks_file=tasks_file,
        **fields,
    )


def extract_tasks(content: str, path: str = "", tasks_file: TasksFile | None = None) -> list[Task]:
    """Extract all tasks from markdown content, tracking the heading above each."""
    tasks = []
    heading: str | None = None
    in_code_block = False

    for line_number, line in enumerate(content.split("\n")):
        if line.lstrip().startswith("```"):
            in_code_block = not in_code_block
            continue
        if in_code_block:
            continue

        if heading_match := HEADING_PATTERN.match(line):
            heading = heading_match.group(2)
            continue

        task = parse_task_line(line, path, line_number, heading, tasks_file)
        if task is not None:
            tasks.append(task)

    return tasks


def _signifier(symbol: str, text: str) -> str:
    return f" {symbol} {text}" if text else ""


def serialize_task(task: Task) -> str:
    """Render a task back into a checklist line."""
    indent = ""
    if task.original_markdown:
        match = TASK_PATTERN.match(task.original_markdown)
        if match:
            indent = match.group(1)
    indent = indent or "- "

    parts = [f"{indent}[{task.status.symbol}] {task.description}"]
    if task.id:
        parts.append(_signifier("🆔", task.id))
    if task.depends_on:
        parts.append(_signifier("⛔", ",".join(task.depends_on)))
    for symbol, priority in PRIORITY_SYMBOLS.items():
        if priority is task.priority:
            parts.append(f" {symbol}")
    if task.recurrence is not None:
        parts.append(_signifier("🔁", task.recurrence.to_text()))
    parts.append(_signifier("➕", format_date(task.created_date)))
    parts.append(_signifier("🛫", format_date(task.start_date)))
    parts.append(_signifier("⏳", format_date(task.scheduled_date)))
    parts.append(_signifier("📅", format_date(task.due_date)))
    parts.append(_signifier("✅", format_date(task.done_date)))
    return "".join(parts)