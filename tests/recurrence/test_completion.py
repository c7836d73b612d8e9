"""Tests for toggling tasks done and creating the next recurring instance."""

from datetime import date

from task_query.completion import next_recurring_task, toggle_done
from task_query.markdown import parse_task_line, serialize_task
from task_query.models import StatusType

TODAY = date(2022, 1, 15)


def toggle_lines(line: str, **kwargs) -> list[str]:
    task = parse_task_line(line)
    return [serialize_task(t) for t in toggle_done(task, TODAY, **kwargs)]


class TestToggleDone:
    """Test toggling non-recurring tasks."""

    def test_complete_open_task(self):
        assert toggle_lines("- [ ] Buy milk 📅 2022-01-14") == ["- [x] Buy milk 📅 2022-01-14 ✅ 2022-01-15"]

    def test_reopen_done_task(self):
        """Test that reopening clears the done date."""
        assert toggle_lines("- [x] Buy milk 📅 2022-01-14 ✅ 2022-01-14") == ["- [ ] Buy milk 📅 2022-01-14"]

    def test_reopen_cancelled_task(self):
        assert toggle_lines("- [-] Old idea") == ["- [ ] Old idea"]

    def test_in_progress_becomes_done(self):
        (task,) = toggle_done(parse_task_line("- [/] Draft essay"), TODAY)
        assert task.status.type == StatusType.DONE
        assert task.done_date == TODAY

    def test_keeps_indentation(self):
        assert toggle_lines("    * [ ] Nested") == ["    * [x] Nested ✅ 2022-01-15"]


class TestToggleRecurring:
    """Test completing recurring tasks."""

    def test_next_instance_precedes_done_task(self):
        lines = toggle_lines("- [ ] Water plants 🔁 every week 📅 2022-01-16")
        assert lines == [
            "- [ ] Water plants 🔁 every week 📅 2022-01-23",
            "- [x] Water plants 🔁 every week 📅 2022-01-16 ✅ 2022-01-15",
        ]

    def test_month_end(self):
        lines = toggle_lines("- [ ] Pay rent #home 🔁 every month 📅 2022-01-31")
        assert lines[0] == "- [ ] Pay rent #home 🔁 every month 📅 2022-02-28"

    def test_when_done(self):
        lines = toggle_lines("- [ ] Haircut 🔁 every 4 weeks when done 📅 2022-01-01")
        assert lines[0] == "- [ ] Haircut 🔁 every 4 weeks when done 📅 2022-02-12"

    def test_created_date_set_to_today(self):
        lines = toggle_lines("- [ ] Review 🔁 every day ➕ 2022-01-01 📅 2022-01-10")
        assert lines[0] == "- [ ] Review 🔁 every day ➕ 2022-01-15 📅 2022-01-11"

    def test_remove_scheduled_date(self):
        lines = toggle_lines(
            "- [ ] Report 🔁 every month 🛫 2022-01-01 ⏳ 2022-01-04 📅 2022-01-10",
            remove_scheduled_date=True,
        )
        assert lines[0] == "- [ ] Report 🔁 every month 🛫 2022-02-01 📅 2022-02-10"

    def test_scheduled_only_is_not_removed(self):
        lines = toggle_lines("- [ ] Report 🔁 every month ⏳ 2022-01-04", remove_scheduled_date=True)
        assert lines[0] == "- [ ] Report 🔁 every month ⏳ 2022-02-04"

    def test_invalid_due_date_drops_recurrence(self):
        """Test that a task with an invalid reference date is completed without a next instance."""
        task = parse_task_line("- [ ] Broken 🔁 every day 📅 2022-02-30")
        assert task.recurrence is None
        result = toggle_done(task, TODAY)
        assert len(result) == 1
        assert result[0].is_done

    def test_next_recurring_task_of_plain_task(self):
        assert next_recurring_task(parse_task_line("- [ ] Plain"), TODAY) is None

    def test_next_date_past_the_calendar_drops_recurrence(self):
        lines = toggle_lines("- [ ] Time capsule 🔁 every 9000 years 📅 2022-01-01")
        assert lines == ["- [x] Time capsule 🔁 every 9000 years 📅 2022-01-01 ✅ 2022-01-15"]
