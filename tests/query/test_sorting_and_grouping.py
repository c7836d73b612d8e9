"""Tests for sorters, groupers and result limits."""

import pytest

from task_query.errors import QueryParseError
from task_query.query.grouping import apply_limits, parse_grouper, partition
from task_query.query.search_info import SearchInfo
from task_query.query.sorting import Sorter, parse_sorter, sort_tasks


def names(tasks):
    return [task.description.split(" #")[0] for task in tasks]


def sorted_by(lines, tasks, today):
    info = SearchInfo.from_tasks(tasks, today=today)
    return names(sort_tasks(tasks, [parse_sorter(line) for line in lines], info))


def grouped_by(lines, tasks, today):
    info = SearchInfo.from_tasks(tasks, today=today)
    groups = partition(tasks, [parse_grouper(line) for line in lines], info)
    return [(group.heading, names(group.tasks)) for group in groups]


class TestSorting:
    """Test 'sort by' instructions."""

    @pytest.mark.parametrize(
        "lines,expected",
        [
            ([], ["Pay rent", "Buy milk", "Write report", "Water plants", "File taxes"]),
            (["sort by due"], ["File taxes", "Buy milk", "Pay rent", "Water plants", "Write report"]),
            (["sort by priority"], ["File taxes", "Pay rent", "Write report", "Buy milk", "Water plants"]),
            (["sort by status"], ["Pay rent", "Write report", "Water plants", "Buy milk", "File taxes"]),
            (["sort by status", "sort by due"], ["Pay rent", "Water plants", "Write report", "File taxes", "Buy milk"]),
            (["sort by description"], ["Buy milk", "File taxes", "Pay rent", "Water plants", "Write report"]),
            (["sort by tag"], ["Pay rent", "Buy milk", "Write report", "File taxes", "Water plants"]),
            (["sort by scheduled"], ["Write report", "Pay rent", "Buy milk", "Water plants", "File taxes"]),
            (["sort by recurring"], ["Water plants", "Pay rent", "Buy milk", "Write report", "File taxes"]),
            (["sort by path"], ["Pay rent", "Water plants", "Buy milk", "File taxes", "Write report"]),
        ],
    )
    def test_sort(self, sample_tasks, today, lines, expected):
        assert sorted_by(lines, sample_tasks, today) == expected

    def test_reverse_keeps_ties_in_input_order(self, sample_tasks, today):
        """Buy milk and Water plants tie on priority in both directions."""
        assert sorted_by(["sort by priority reverse"], sample_tasks, today) == [
            "Buy milk",
            "Water plants",
            "Write report",
            "Pay rent",
            "File taxes",
        ]

    def test_reverse_is_wrapped_once(self, sample_tasks, today):
        """The reversed comparator is built with the sorter and normalized to -1, 0 or 1."""
        sorter = Sorter("sort by weight reverse", "weight", lambda a, b, _: 7, reverse=True)
        info = SearchInfo.from_tasks(sample_tasks, today=today)
        first, second = sample_tasks[:2]

        effective = sorter.effective
        assert sorter.compare(first, second, info) == -1
        assert sorter.compare(second, first, info) == -1
        assert sorter.effective is effective

        assert Sorter("sort by weight", "weight", lambda a, b, _: 7).compare(first, second, info) == 1

    def test_invalid_dates_sort_after_valid_and_before_absent(self, make_task, today):
        tasks = [
            make_task("- [ ] Bad 📅 2022-02-30"),
            make_task("- [ ] Missing"),
            make_task("- [ ] Later 📅 2022-03-01"),
            make_task("- [ ] Early 📅 2022-01-01"),
        ]
        assert sorted_by(["sort by due"], tasks, today) == ["Early", "Later", "Bad", "Missing"]

    def test_sort_by_function(self, sample_tasks, today):
        assert sorted_by(["sort by function reverse task.due"], sample_tasks, today) == [
            "Write report",
            "Water plants",
            "Pay rent",
            "Buy milk",
            "File taxes",
        ]

    def test_function_none_sorts_last(self, sample_tasks, today):
        assert sorted_by(["sort by function task.scheduled"], sample_tasks, today)[0] == "Write report"
        assert sorted_by(["sort by function task.scheduled"], sample_tasks, today)[1:] == [
            "Pay rent",
            "Buy milk",
            "Water plants",
            "File taxes",
        ]

    def test_sorter_records_property(self):
        sorter = parse_sorter("sort by happens reverse")
        assert (sorter.property, sorter.reverse) == ("happens", True)

    @pytest.mark.parametrize(
        "line", ["sort by colour", "sort by tag 0", "sort by due 2", "sort by function (task.due", "sort due"]
    )
    def test_invalid(self, line):
        with pytest.raises(QueryParseError):
            parse_sorter(line)


class TestGrouping:
    """Test 'group by' instructions."""

    def test_first_seen_order(self, sample_tasks, today):
        assert grouped_by(["group by status"], sample_tasks, today) == [
            ("Todo", ["Pay rent", "Write report", "Water plants"]),
            ("Done", ["Buy milk", "File taxes"]),
        ]

    def test_reverse(self, sample_tasks, today):
        groups = grouped_by(["group by status reverse"], sample_tasks, today)
        assert [heading for heading, _ in groups] == ["Done", "Todo"]

    def test_tags(self, sample_tasks, today):
        assert grouped_by(["group by tags"], sample_tasks, today) == [
            ("#home", ["Pay rent", "Buy milk"]),
            ("#work", ["Write report", "File taxes"]),
            ("(No tags)", ["Water plants"]),
        ]

    def test_task_with_several_tags_is_in_each_group(self, make_task, today):
        tasks = [make_task("- [ ] Both #a #b"), make_task("- [ ] Only #b")]
        assert grouped_by(["group by tags"], tasks, today) == [("#a", ["Both"]), ("#b", ["Both", "Only"])]

    def test_nested_levels(self, sample_tasks, today):
        assert grouped_by(["group by root", "group by filename"], sample_tasks, today) == [
            ("home/ > bills.md", ["Pay rent"]),
            ("home/ > shopping.md", ["Buy milk"]),
            ("home/ > garden.md", ["Water plants"]),
            ("work/ > report.md", ["Write report"]),
            ("work/ > admin.md", ["File taxes"]),
        ]

    @pytest.mark.parametrize(
        "line,first_heading",
        [
            ("group by due", "2022-01-15 Saturday"),
            ("group by scheduled", "No scheduled date"),
            ("group by priority", "High priority"),
            ("group by heading", "Bills"),
            ("group by backlink", "bills > Bills"),
            ("group by recurrence", "None"),
            ("group by recurring", "Not Recurring"),
            ("group by status.type", "TODO"),
            ("group by path", "home/bills.md"),
        ],
    )
    def test_group_names(self, sample_tasks, today, line, first_heading):
        assert grouped_by([line], sample_tasks, today)[0][0] == first_heading

    def test_invalid_date_group(self, make_task, today):
        assert grouped_by(["group by due"], [make_task("- [ ] Bad 📅 2022-02-30")], today)[0][0] == "Invalid due date"

    def test_group_by_function(self, sample_tasks, today):
        groups = grouped_by(["group by function task.file.folder"], sample_tasks, today)
        assert [heading for heading, _ in groups] == ["home/", "work/"]

    def test_function_list_values(self, make_task, today):
        tasks = [make_task("- [ ] Both #a #b"), make_task("- [ ] Untagged")]
        assert grouped_by(["group by function task.tags"], tasks, today) == [
            ("#a", ["Both"]),
            ("#b", ["Both"]),
            ("", ["Untagged"]),
        ]

    def test_no_groupers_is_one_group(self, sample_tasks, today):
        ((heading, tasks),) = grouped_by([], sample_tasks, today)
        assert heading == ""
        assert len(tasks) == 5

    @pytest.mark.parametrize("line", ["group by colour", "group by", "group by function"])
    def test_invalid(self, line):
        with pytest.raises(QueryParseError):
            parse_grouper(line)


class TestLimits:
    """Test total and per-group limits."""

    @pytest.fixture
    def groups(self, sample_tasks, today):
        info = SearchInfo.from_tasks(sample_tasks, today=today)
        return partition(sample_tasks, [parse_grouper("group by status")], info)

    def test_total_limit_applies_across_groups(self, groups):
        limited = apply_limits(groups, 2, None)
        assert [(g.heading, names(g.tasks)) for g in limited] == [("Todo", ["Pay rent", "Write report"])]

    def test_total_limit_spills_into_next_group(self, groups):
        limited = apply_limits(groups, 4, None)
        assert [len(g.tasks) for g in limited] == [3, 1]

    def test_group_limit(self, groups):
        limited = apply_limits(groups, None, 1)
        assert [(g.heading, names(g.tasks)) for g in limited] == [("Todo", ["Pay rent"]), ("Done", ["Buy milk"])]

    def test_both_limits(self, groups):
        limited = apply_limits(groups, 3, 2)
        assert [names(g.tasks) for g in limited] == [["Pay rent", "Write report"], ["Buy milk"]]

    def test_zero_limit(self, groups):
        assert apply_limits(groups, 0, None) == []
