from datetime import date
from typing import Optional

import typer

from task_query.config import get_config
from task_query.dates import parse_date
from task_query.errors import InvalidDateValue
from task_query.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import task_query

        typer.echo(f"task-query version: {task_query.__version__}")
        raise typer.Exit()


def parse_day(value: Optional[str], option: str = "--today") -> Optional[date]:
    """Parse a YYYY-MM-DD option value that must name a real day."""
    if value is None:
        return None
    try:
        day = parse_date(value)
    except InvalidDateValue:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option)
    if not isinstance(day, date):
        raise typer.BadParameter(f"{value!r} is not a calendar date", param_hint=option)
    return day


app = typer.Typer(name="task-query")


@app.callback()
def app_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Log level for messages on stderr",
        envvar="TASK_QUERY_LOG_LEVEL",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """task-query - Query and complete tasks in markdown files."""
    setup_logging((log_level or get_config().log_level).upper())
