"""
Toggling tasks done, including creation of the next instance of recurring tasks.
"""

from datetime import date

from loguru import logger

from task_query.markdown.task_parser import serialize_task
from task_query.models import STATUSES, Task, TODO, status_for_symbol
from task_query.recurrence.recurrence import Recurrence


def _log_start_of_edit(location: str, task: Task) -> None:
    logger.debug(
        f"{location}: task line number: {task.location.line_number}. file path: \"{task.path}\""
    )
    logger.debug(f"{location} original: {task.original_markdown}")


def _log_end_of_edit(location: str, tasks: list[Task]) -> None:
    for index, task in enumerate(tasks, start=1):
        logger.debug(f"{location} ==> {index}   : {serialize_task(task)}")


def next_recurring_task(task: Task, today: date, remove_scheduled_date: bool = False) -> Task | None:
    """The next instance of a recurring task, or None if it has no next occurrence."""
    if task.recurrence is None:
        return None

    occurrence = task.recurrence.next(today, remove_scheduled_date)
    if occurrence is None:
        logger.info(
            f"Recurrence {task.recurrence.to_text()!r} dropped for {task.description!r}: "
            "no valid reference date"
        )
        return None

    return task.with_changes(
        status=TODO,
        start_date=occurrence.start_date,
        scheduled_date=occurrence.scheduled_date,
        due_date=occurrence.due_date,
        created_date=today if task.created_date is not None else None,
        done_date=None,
        recurrence=Recurrence(rule=task.recurrence.rule, occurrence=occurrence),
    )


def toggle_done(task: Task, today: date | None = None, remove_scheduled_date: bool = False) -> list[Task]:
    """Toggle a task between open and done.

    Returns the tasks that replace the original line. Completing a recurring
    task yields the next instance followed by the completed task.
    """
    today = today or date.today()
    _log_start_of_edit("toggle_done()", task)

    if task.is_done:
        reopened = task.with_changes(status=status_for_symbol(task.status.next_symbol), done_date=None)
        if reopened.status.is_completed:
            reopened = reopened.with_changes(status=TODO)
        result = [reopened]
    else:
        next_status = status_for_symbol(task.status.next_symbol)
        if not next_status.is_completed:
            next_status = STATUSES["x"]
        completed = task.with_changes(status=next_status, done_date=today)
        following = next_recurring_task(task, today, remove_scheduled_date)
        result = [following, completed] if following is not None else [completed]

    _log_end_of_edit("toggle_done()", result)
    return result
