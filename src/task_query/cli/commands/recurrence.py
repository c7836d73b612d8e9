"""Command module for recurrence: next occurrences and completing tasks."""

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from task_query.cli.app import app, parse_day
from task_query.completion import toggle_done
from task_query.config import get_config
from task_query.dates import DateValue, format_date, parse_date
from task_query.errors import InvalidDateValue, RecurrenceRuleError
from task_query.markdown import parse_task_line, serialize_task
from task_query.recurrence import Occurrence, RecurrenceRule, next_occurrence

console = Console()


def _slot(value: Optional[str], option: str) -> DateValue:
    # Well-formed but impossible dates stay as invalid dates
    try:
        return parse_date(value)
    except InvalidDateValue:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option)


@app.command("next")
def next_command(
    rule: str = typer.Argument(..., help='Recurrence rule, e.g. "every 2 weeks when done"'),
    start: Optional[str] = typer.Option(None, "--start", help="Start date"),
    scheduled: Optional[str] = typer.Option(None, "--scheduled", help="Scheduled date"),
    due: Optional[str] = typer.Option(None, "--due", help="Due date"),
    today: Optional[str] = typer.Option(None, "--today", help="Completion date, YYYY-MM-DD"),
    remove_scheduled: bool = typer.Option(
        False, "--remove-scheduled", help="Drop the scheduled date unless it is the only date"
    ),
) -> None:
    """Show the next occurrence of RULE for the given dates."""
    try:
        parsed = RecurrenceRule.parse(rule)
    except RecurrenceRuleError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)

    occurrence = Occurrence(
        start_date=_slot(start, "--start"),
        scheduled_date=_slot(scheduled, "--scheduled"),
        due_date=_slot(due, "--due"),
    )
    remove = remove_scheduled or get_config().remove_scheduled_date_on_recurrence
    result = next_occurrence(occurrence, parsed, parse_day(today), remove)
    if result is None:
        console.print("[red]No next occurrence: invalid reference date or date out of range[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Next occurrence: {parsed.to_text()}")
    table.add_column("Date", style="cyan")
    table.add_column("Current")
    table.add_column("Next", style="green")
    for label, before, after in (
        ("start", occurrence.start_date, result.start_date),
        ("scheduled", occurrence.scheduled_date, result.scheduled_date),
        ("due", occurrence.due_date, result.due_date),
    ):
        table.add_row(label, format_date(before) or "-", format_date(after) or "-")
    console.print(table)


@app.command()
def toggle(
    line: str = typer.Argument(..., help='Task line, e.g. "- [ ] Pay rent 🔁 every month 📅 2022-01-31"'),
    today: Optional[str] = typer.Option(None, "--today", help="Completion date, YYYY-MM-DD"),
    remove_scheduled: bool = typer.Option(
        False, "--remove-scheduled", help="Drop the scheduled date from the next occurrence"
    ),
) -> None:
    """Toggle a task line done or not done and print the replacement lines."""
    task = parse_task_line(line)
    if task is None:
        console.print(f"[red]Not a task line: {escape(line)}[/red]")
        raise typer.Exit(1)

    remove = remove_scheduled or get_config().remove_scheduled_date_on_recurrence
    for replacement in toggle_done(task, parse_day(today), remove):
        console.print(escape(serialize_task(replacement)), soft_wrap=True)
