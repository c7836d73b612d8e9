"""
``filter by <expression>`` filters, evaluated with the expression language.
"""

import re
from datetime import date

from task_query.errors import FilterParseError, QueryExecutionError, QuerySyntaxError
from task_query.query.ast import BinaryOpNode, ExpressionNode, FieldNode, FunctionCallNode, UnaryOpNode
from task_query.query.expression_eval import FUNCTIONS, ExpressionEvaluator
from task_query.query.field_resolver import FieldResolver
from task_query.query.filters.field import FilterField
from task_query.query.filters.filter import Filter
from task_query.query.parser import ExpressionParser


def validate_expression(expression: ExpressionNode) -> None:
    """Reject unknown fields and functions before any task is evaluated.

    Raises:
        QueryExecutionError: Naming the first unknown field or function
    """
    if isinstance(expression, FieldNode):
        if not FieldResolver.is_known_field(expression.field_name):
            raise QueryExecutionError(f"Unknown field: {expression.field_name}")
    elif isinstance(expression, FunctionCallNode):
        if expression.function_name not in FUNCTIONS:
            raise QueryExecutionError(f"Unknown function: {expression.function_name}")
        for argument in expression.arguments:
            validate_expression(argument)
    elif isinstance(expression, UnaryOpNode):
        validate_expression(expression.operand)
    elif isinstance(expression, BinaryOpNode):
        validate_expression(expression.left)
        validate_expression(expression.right)


def compile_expression(text: str) -> ExpressionNode:
    """Parse and validate an expression.

    Raises:
        FilterParseError: If the expression has a syntax error or names an unknown field
    """
    try:
        expression = ExpressionParser.parse(text)
        validate_expression(expression)
    except (QuerySyntaxError, QueryExecutionError) as e:
        raise FilterParseError(f"Invalid expression '{text}': {e.message}") from e
    return expression


class FunctionField(FilterField):
    """``filter by [function] <expression>``.

    A task matches when the expression is truthy. Tasks for which the
    expression cannot be evaluated do not match.
    """

    pattern = re.compile(r"^filter\s+by\b\s*(?:function\b\s*)?(.*)$", re.IGNORECASE)

    def create_filter(self, line: str, today: date) -> Filter:
        text = self.pattern.match(line).group(1).strip()
        if not text:
            raise FilterParseError(f"'filter by' needs an expression: {line}")
        expression = compile_expression(text)

        def predicate(task, search_info) -> bool:
            try:
                return bool(ExpressionEvaluator(task, search_info).evaluate(expression))
            except (QueryExecutionError, TypeError):
                return False

        return Filter(line, predicate, f"filter by {text}")
