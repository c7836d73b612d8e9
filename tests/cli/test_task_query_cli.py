"""Tests for the task-query CLI commands."""

import asyncio
from pathlib import Path
from textwrap import dedent
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner
from watchfiles import Change

from task_query import __version__
from task_query.cli.commands.watch import run_watch
from task_query.cli.main import app
from task_query.config import TaskQueryConfig


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def vault(tmp_path) -> Path:
    (tmp_path / "tasks.md").write_text(
        dedent(
            """\
            - [ ] Pay rent #home 📅 2022-01-15
            - [x] Buy milk ✅ 2022-01-14
            - [ ] Write report 📅 2022-01-20
            """
        ),
        encoding="utf-8",
    )
    return tmp_path


def write_query(vault: Path, *lines: str) -> Path:
    path = vault / "today.md"
    path.write_text("# Today\n```tasks\n" + "\n".join(lines) + "\n```\n", encoding="utf-8")
    return path


class TestQueryCommand:
    """Test running the queries in a file."""

    def test_runs_each_block(self, runner, vault):
        query_file = write_query(vault, "not done", "sort by due reverse")
        result = runner.invoke(app, ["query", str(query_file), "--vault", str(vault), "--today", "2022-01-15"])

        assert result.exit_code == 0, result.output
        assert "Query 1 (line 2)" in result.output
        report = result.output.index("- [ ] Write report 📅 2022-01-20")
        rent = result.output.index("- [ ] Pay rent #home 📅 2022-01-15")
        assert report < rent
        assert "Buy milk" not in result.output
        assert "2 tasks" in result.output

    def test_group_headings(self, runner, vault):
        query_file = write_query(vault, "group by status")
        result = runner.invoke(app, ["query", str(query_file), "--today", "2022-01-15"])

        assert result.exit_code == 0, result.output
        assert "#### Todo" in result.output
        assert "#### Done" in result.output
        assert "3 tasks" in result.output

    def test_explain(self, runner, vault):
        query_file = write_query(vault, "explain", "due before tomorrow")
        result = runner.invoke(app, ["query", str(query_file), "--today", "2022-01-15"])

        assert result.exit_code == 0, result.output
        assert "due date is before 2022-01-16" in result.output
        assert "1 task" in result.output

    def test_errors_fail_the_command(self, runner, vault):
        query_file = write_query(vault, "not done", "wibble")
        result = runner.invoke(app, ["query", str(query_file), "--today", "2022-01-15"])

        assert result.exit_code == 1
        assert "do not understand query: wibble" in result.output
        assert "2 tasks" in result.output

    def test_file_without_queries(self, runner, vault):
        result = runner.invoke(app, ["query", str(vault / "tasks.md")])
        assert result.exit_code == 1
        assert "No tasks queries found" in result.output

    def test_bad_today(self, runner, vault):
        query_file = write_query(vault, "not done")
        result = runner.invoke(app, ["query", str(query_file), "--today", "2022-02-30"])
        assert result.exit_code == 2

    def test_global_query_from_environment(self, runner, vault, monkeypatch):
        monkeypatch.setenv("TASK_QUERY_GLOBAL_QUERY", "tags include #home")
        query_file = write_query(vault, "not done")
        result = runner.invoke(app, ["query", str(query_file), "--today", "2022-01-15"])

        assert result.exit_code == 0, result.output
        assert "Pay rent" in result.output
        assert "Write report" not in result.output


class TestNextCommand:
    """Test computing next occurrences."""

    def test_month_end_clamps(self, runner):
        result = runner.invoke(app, ["next", "every month", "--due", "2022-01-31", "--today", "2022-01-15"])

        assert result.exit_code == 0, result.output
        assert "Next occurrence: every month" in result.output
        assert "2022-02-28" in result.output

    def test_when_done_uses_today(self, runner):
        result = runner.invoke(
            app, ["next", "every week when done", "--due", "2022-01-01", "--today", "2022-01-15"]
        )
        assert result.exit_code == 0, result.output
        assert "2022-01-22" in result.output

    def test_bad_rule(self, runner):
        result = runner.invoke(app, ["next", "sometimes", "--due", "2022-01-31"])
        assert result.exit_code == 1

    def test_invalid_reference_date(self, runner):
        result = runner.invoke(app, ["next", "every day", "--due", "2022-02-30"])
        assert result.exit_code == 1
        assert "No next occurrence" in result.output

    def test_next_date_out_of_range(self, runner):
        result = runner.invoke(app, ["next", "every 3000000 days", "--due", "2022-01-01"])
        assert result.exit_code == 1
        assert "No next occurrence" in result.output

    def test_malformed_date(self, runner):
        result = runner.invoke(app, ["next", "every day", "--due", "soon"])
        assert result.exit_code == 2


class TestToggleCommand:
    """Test toggling task lines."""

    def test_recurring_task(self, runner):
        result = runner.invoke(
            app, ["toggle", "--today", "2022-01-15", "--", "- [ ] Water plants 🔁 every week 📅 2022-01-16"]
        )

        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [
            "- [ ] Water plants 🔁 every week 📅 2022-01-23",
            "- [x] Water plants 🔁 every week 📅 2022-01-16 ✅ 2022-01-15",
        ]

    def test_reopen(self, runner):
        result = runner.invoke(app, ["toggle", "--", "- [x] Buy milk ✅ 2022-01-14"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "- [ ] Buy milk"

    def test_not_a_task(self, runner):
        result = runner.invoke(app, ["toggle", "just some text"])
        assert result.exit_code == 1
        assert "Not a task line" in result.output


def test_version(runner):
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"task-query version: {__version__}" in result.output


class TestRunWatch:
    """Tests for run_watch async function."""

    @pytest.mark.asyncio
    async def test_reruns_queries_on_change(self, vault, capsys):
        """A markdown change republishes the vault and the queries re-run."""
        query_file = write_query(vault, "not done", "sort by description")

        async def fake_awatch(path, stop_event=None):
            with (vault / "tasks.md").open("a", encoding="utf-8") as f:
                f.write("- [ ] Laundry\n")
            yield {(Change.modified, str(vault / "tasks.md"))}
            # Let the re-evaluation run before the watch loop ends
            await asyncio.sleep(0.05)

        config = TaskQueryConfig(refresh_debounce_seconds=0)
        with patch("task_query.cli.commands.watch.awatch", fake_awatch):
            await run_watch(query_file, vault, config)

        output = capsys.readouterr().out
        assert "Laundry" in output
        assert "3 tasks" in output

    @pytest.mark.asyncio
    async def test_file_without_queries(self, vault):
        with pytest.raises(typer.Exit):
            await run_watch(vault / "tasks.md", vault, TaskQueryConfig())
