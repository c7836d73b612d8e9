"""Shared fixtures for task-query tests."""

from datetime import date

import pytest

from task_query.config import get_config
from task_query.markdown import parse_task_line
from task_query.models import TasksFile

TODAY = date(2022, 1, 15)


@pytest.fixture(autouse=True)
def clear_config_cache(monkeypatch):
    """Keep settings from the developer's environment out of tests."""
    for name in (
        "TASK_QUERY_GLOBAL_QUERY",
        "TASK_QUERY_REMOVE_SCHEDULED_DATE_ON_RECURRENCE",
        "TASK_QUERY_REFRESH_DEBOUNCE_SECONDS",
        "TASK_QUERY_MIDNIGHT_BUFFER_SECONDS",
        "TASK_QUERY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_task():
    """Build a task from a markdown line, as the vault loader would."""

    def _make(line: str, path: str = "notes/inbox.md", line_number: int = 0, heading=None, frontmatter=None):
        tasks_file = TasksFile(path, frontmatter or {})
        task = parse_task_line(line, path, line_number, heading, tasks_file)
        assert task is not None, f"not a task line: {line}"
        return task

    return _make


@pytest.fixture
def sample_tasks(make_task):
    """Five tasks across two files, three open and two done."""
    return [
        make_task("- [ ] Pay rent #home ⏫ 📅 2022-01-15", "home/bills.md", 3, "Bills"),
        make_task("- [x] Buy milk #home 📅 2022-01-14 ✅ 2022-01-14", "home/shopping.md", 1),
        make_task("- [ ] Write report #work 🔼 ⏳ 2022-01-17 📅 2022-01-20", "work/report.md", 5, "Drafts"),
        make_task("- [ ] Water plants 🔁 every week 📅 2022-01-16", "home/garden.md", 2),
        make_task("- [x] File taxes #work 🔺 📅 2022-01-10 ✅ 2022-01-09", "work/admin.md", 7),
    ]
