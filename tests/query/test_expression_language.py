"""Tests for the expression lexer, parser and evaluator used by 'filter by'."""

from datetime import date

import pytest

from task_query.errors import QueryExecutionError, QuerySyntaxError
from task_query.models import TasksFile
from task_query.query.ast import BinaryOpNode, FieldNode, FunctionCallNode, LiteralNode, UnaryOpNode
from task_query.query.expression_eval import ExpressionEvaluator
from task_query.query.field_resolver import FieldResolver
from task_query.query.lexer import ExpressionLexer, TokenType
from task_query.query.parser import ExpressionParser
from task_query.query.search_info import SearchInfo


class TestExpressionLexer:
    """Test tokenizing expressions."""

    def test_comparison(self):
        tokens = ExpressionLexer('task.due <= "2022-01-31"').tokenize()
        assert [t.type for t in tokens] == [
            TokenType.FIELD_PATH,
            TokenType.LESS_EQUAL,
            TokenType.STRING,
            TokenType.EOF,
        ]

    def test_keywords_are_case_insensitive(self):
        tokens = ExpressionLexer("a and not b Or true").tokenize()
        assert [t.type for t in tokens[:-1]] == [
            TokenType.IDENTIFIER,
            TokenType.AND,
            TokenType.NOT,
            TokenType.IDENTIFIER,
            TokenType.OR,
            TokenType.BOOLEAN,
        ]

    def test_double_equals(self):
        tokens = ExpressionLexer("a == 1").tokenize()
        assert tokens[1].type == TokenType.EQUALS
        assert tokens[1].value == "="

    def test_negative_number(self):
        tokens = ExpressionLexer("-3.5").tokenize()
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == "-3.5"

    def test_string_escapes(self):
        tokens = ExpressionLexer(r"'it\'s'").tokenize()
        assert tokens[0].value == "it's"

    def test_unterminated_string(self):
        with pytest.raises(QuerySyntaxError, match="Unterminated string"):
            ExpressionLexer('"open').tokenize()

    def test_columns(self):
        tokens = ExpressionLexer('a  >= "x"').tokenize()
        assert [t.column for t in tokens] == [1, 4, 7, 10]

    def test_unexpected_character(self):
        with pytest.raises(QuerySyntaxError) as exc_info:
            ExpressionLexer("a ? b").tokenize()
        assert exc_info.value.column == 3
        assert str(exc_info.value) == "Unexpected character '?' at column 3"


class TestExpressionParser:
    """Test building expression trees."""

    def test_precedence(self):
        """Test that AND binds tighter than OR and NOT tighter than AND."""
        tree = ExpressionParser.parse("a OR NOT b AND c")
        assert tree == BinaryOpNode(
            "OR",
            FieldNode("a"),
            BinaryOpNode("AND", UnaryOpNode("NOT", FieldNode("b")), FieldNode("c")),
        )

    def test_function_call(self):
        tree = ExpressionParser.parse('contains(task.tags, "#home")')
        assert tree == FunctionCallNode("contains", [FieldNode("task.tags"), LiteralNode("#home")])

    def test_parentheses(self):
        tree = ExpressionParser.parse("(a OR b) AND c")
        assert isinstance(tree, BinaryOpNode)
        assert tree.operator == "AND"

    def test_literals(self):
        assert ExpressionParser.parse("42") == LiteralNode(42)
        assert ExpressionParser.parse("1.5") == LiteralNode(1.5)
        assert ExpressionParser.parse("false") == LiteralNode(False)
        assert ExpressionParser.parse("null") == LiteralNode(None)

    @pytest.mark.parametrize("text", ["", "a =", "(a", "a b", "f(a", ")"])
    def test_syntax_errors(self, text):
        with pytest.raises(QuerySyntaxError):
            ExpressionParser.parse(text)


@pytest.fixture
def search_info(make_task):
    tasks = [
        make_task("- [ ] Pay rent #home #bills ⏫ 📅 2022-01-15", "home/bills.md", frontmatter={"owner": "sam"}),
        make_task("- [ ] Plan trip 🆔 trip", "travel.md"),
    ]
    return SearchInfo.from_tasks(tasks, TasksFile("home/index.md", {"context": "home"}), date(2022, 1, 15))


def evaluate(text, search_info, index=0):
    task = search_info.all_tasks[index]
    return ExpressionEvaluator(task, search_info).evaluate(ExpressionParser.parse(text))


class TestFieldResolver:
    """Test resolving task and query fields."""

    @pytest.mark.parametrize(
        "field_name,expected",
        [
            ("task.description", "Pay rent #home #bills"),
            ("description", "Pay rent #home #bills"),
            ("task.priority", "high"),
            ("task.priority.number", 1),
            ("task.due", date(2022, 1, 15)),
            ("task.start", None),
            ("task.happens", date(2022, 1, 15)),
            ("task.tags", ["#home", "#bills"]),
            ("task.status.type", "TODO"),
            ("task.isDone", False),
            ("task.file.folder", "home/"),
            ("task.file.property.owner", "sam"),
            ("query.file.path", "home/index.md"),
            ("query.file.property.context", "home"),
        ],
    )
    def test_fields(self, search_info, field_name, expected):
        task = search_info.all_tasks[0]
        assert FieldResolver.resolve_field(task, search_info, field_name) == expected

    def test_unknown_field(self, search_info):
        with pytest.raises(QueryExecutionError, match="Unknown field"):
            FieldResolver.resolve_field(search_info.all_tasks[0], search_info, "task.colour")

    def test_query_file_needed(self, make_task):
        task = make_task("- [ ] A")
        info = SearchInfo.from_tasks([task])
        with pytest.raises(QueryExecutionError, match="query file"):
            FieldResolver.resolve_field(task, info, "query.file.path")

    @pytest.mark.parametrize(
        "field_name,known",
        [("due", True), ("task.file.property.x", True), ("query.file.root", True),
         ("task.file.property.", False), ("query.file.size", False), ("colour", False)],
    )
    def test_is_known_field(self, field_name, known):
        assert FieldResolver.is_known_field(field_name) is known


class TestExpressionEvaluator:
    """Test evaluating expressions against a task."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ('task.due = "2022-01-15"', True),
            ('task.due < "2022-02-01"', True),
            ("task.due >= today()", True),
            ('task.due > date("2022-01-15")', False),
            ('contains(task.tags, "#home")', True),
            ('contains(task.description, "RENT")', True),
            ("length(task.tags) = 2", True),
            ('lower(task.priority) = "high"', True),
            ('upper(task.status.name) = "TODO"', True),
            ("NOT task.isRecurring", True),
            ('task.priority.number < 2 AND query.file.property.context = "home"', True),
            ("task.start < today()", False),
            ("task.start = null", True),
        ],
    )
    def test_expressions(self, search_info, text, expected):
        assert evaluate(text, search_info) == expected

    def test_id_is_none_when_unset(self, search_info):
        assert evaluate("task.id", search_info) is None
        assert evaluate("task.id", search_info, index=1) == "trip"

    def test_unknown_function(self, search_info):
        with pytest.raises(QueryExecutionError, match="Unknown function"):
            evaluate("shout(task.description)", search_info)

    def test_bad_date_argument(self, search_info):
        with pytest.raises(QueryExecutionError, match="cannot parse"):
            evaluate('date("soon")', search_info)

    def test_incomparable_values(self, search_info):
        with pytest.raises(QueryExecutionError, match="Cannot compare"):
            evaluate("task.tags < 3", search_info)
