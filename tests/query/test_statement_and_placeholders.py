"""Tests for splitting queries into statements and expanding placeholders."""

from datetime import date

import pytest

from task_query.errors import PlaceholderResolutionError
from task_query.models import TasksFile
from task_query.query.placeholders import expand_placeholders, resolve_placeholder
from task_query.query.statement import Statement, split_statements


class TestSplitStatements:
    """Test splitting query text into instruction lines."""

    def test_trims_and_skips_blank_and_comment_lines(self):
        source = "  not done  \n\n# a comment\n   # indented comment\ndue today\n"
        statements = split_statements(source)
        assert [s.raw_instruction for s in statements] == ["not done", "due today"]
        assert [s.line_number for s in statements] == [0, 4]
        assert all(s.source == source for s in statements)

    def test_continuation_lines(self):
        statements = split_statements("(due today) OR \\\n  (done)\nsort by due")
        assert [s.raw_instruction for s in statements] == ["(due today) OR (done)", "sort by due"]

    def test_doubled_backslash_is_literal(self):
        (statement,) = split_statements("description includes a\\\\")
        assert statement.raw_instruction == "description includes a\\"

    def test_trailing_continuation(self):
        (statement,) = split_statements("not \\\ndone \\")
        assert statement.raw_instruction == "not done"

    def test_empty(self):
        assert split_statements("") == []


class TestStatement:
    def test_explain_shows_expansion(self):
        statement = Statement.of("path includes {{query.file.folder}}").with_expansion("path includes work/")
        assert statement.explain() == "path includes {{query.file.folder}} =>\npath includes work/"
        assert str(statement) == "path includes work/"

    def test_explain_without_expansion(self):
        assert Statement.of("done").explain() == "done"


@pytest.fixture
def query_file():
    return TasksFile(
        "projects/alpha/plan.md",
        {"context": "#work", "due": date(2022, 1, 20), "tags": ["a", "b"], "draft": True},
    )


class TestPlaceholders:
    """Test expanding {{...}} placeholders."""

    @pytest.mark.parametrize(
        "expression,expected",
        [
            ("query.file.path", "projects/alpha/plan.md"),
            ("query.file.folder", "projects/alpha/"),
            ("query.file.filename", "plan.md"),
            ("query.file.filenameWithoutExtension", "plan"),
            ("query.file.root", "projects/"),
            ("query.file.property('context')", "#work"),
            ('query.file.property("due")', "2022-01-20"),
            ("query.file.property('tags')", "a, b"),
            ("query.file.property('draft')", "true"),
            ("query.file.hasProperty('missing')", "false"),
        ],
    )
    def test_resolve(self, query_file, expression, expected):
        assert resolve_placeholder(expression, query_file) == expected

    def test_expand(self, query_file):
        statement = expand_placeholders(Statement.of("tags include {{ query.file.property('context') }}"), query_file)
        assert statement.any_placeholders_expanded == "tags include #work"
        assert statement.raw_instruction == "tags include {{ query.file.property('context') }}"

    def test_no_placeholder_is_unchanged(self, query_file):
        statement = Statement.of("not done")
        assert expand_placeholders(statement, query_file) is statement

    def test_missing_property(self, query_file):
        statement = Statement.of("path includes {{query.file.property('nope')}}")
        with pytest.raises(PlaceholderResolutionError) as exc_info:
            expand_placeholders(statement, query_file)
        assert exc_info.value.statement is statement
        assert "nope" in str(exc_info.value)

    def test_unknown_placeholder(self, query_file):
        with pytest.raises(PlaceholderResolutionError, match="Unknown placeholder"):
            expand_placeholders(Statement.of("path includes {{query.file.size}}"), query_file)

    def test_no_file_context(self):
        with pytest.raises(PlaceholderResolutionError, match="no file context"):
            expand_placeholders(Statement.of("path includes {{query.file.path}}"), None)
