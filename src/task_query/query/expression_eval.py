"""
Expression evaluator for query expressions.

Evaluates AST expressions against a task.
"""

from datetime import date
from typing import Any

from task_query.dates import parse_date
from task_query.errors import InvalidDateValue, QueryExecutionError
from task_query.models import Task
from task_query.query.ast import (
    BinaryOpNode,
    ExpressionNode,
    FieldNode,
    FunctionCallNode,
    LiteralNode,
    UnaryOpNode,
)
from task_query.query.field_resolver import FieldResolver
from task_query.query.search_info import SearchInfo

FUNCTIONS = ("contains", "length", "lower", "upper", "date", "today")


def _coerce_dates(left: Any, right: Any) -> tuple[Any, Any]:
    """Compare ISO strings against dates as dates."""
    if isinstance(left, date) and isinstance(right, str):
        return left, _to_date(right)
    if isinstance(right, date) and isinstance(left, str):
        return _to_date(left), right
    return left, right


def _to_date(text: str) -> date | None:
    try:
        value = parse_date(text)
    except InvalidDateValue:
        return None
    return value if isinstance(value, date) else None


class ExpressionEvaluator:
    """Evaluates expressions in the context of a task."""

    def __init__(self, task: Task, search_info: SearchInfo):
        self.task = task
        self.search_info = search_info

    def evaluate(self, expression: ExpressionNode) -> Any:
        """
        Evaluate an expression node.

        Args:
            expression: AST expression node

        Returns:
            Evaluated value

        Raises:
            QueryExecutionError: If a field, operator or function cannot be evaluated
        """
        if isinstance(expression, LiteralNode):
            return expression.value

        elif isinstance(expression, FieldNode):
            return FieldResolver.resolve_field(self.task, self.search_info, expression.field_name)

        elif isinstance(expression, UnaryOpNode):
            if expression.operator.upper() != "NOT":
                raise QueryExecutionError(f"Unknown operator: {expression.operator}")
            return not bool(self.evaluate(expression.operand))

        elif isinstance(expression, BinaryOpNode):
            operator = expression.operator.upper()
            # Short-circuit so the right side is not evaluated needlessly
            if operator == "AND":
                return bool(self.evaluate(expression.left)) and bool(self.evaluate(expression.right))
            if operator == "OR":
                return bool(self.evaluate(expression.left)) or bool(self.evaluate(expression.right))
            left = self.evaluate(expression.left)
            right = self.evaluate(expression.right)
            return self._eval_binary_op(operator, left, right)

        elif isinstance(expression, FunctionCallNode):
            args = [self.evaluate(arg) for arg in expression.arguments]
            return self._eval_function(expression.function_name, args)

        else:
            raise QueryExecutionError(f"Unknown expression type: {type(expression)}")

    def _eval_binary_op(self, operator: str, left: Any, right: Any) -> Any:
        """Evaluate comparison operators."""
        left, right = _coerce_dates(left, right)
        if operator == "=":
            return left == right
        elif operator == "!=":
            return left != right

        if left is None or right is None:
            return False
        try:
            if operator == "<":
                return left < right
            elif operator == ">":
                return left > right
            elif operator == "<=":
                return left <= right
            elif operator == ">=":
                return left >= right
        except TypeError as e:
            raise QueryExecutionError(f"Cannot compare {left!r} {operator} {right!r}") from e
        raise QueryExecutionError(f"Unknown operator: {operator}")

    def _eval_function(self, function_name: str, args: list[Any]) -> Any:
        """Evaluate function calls."""
        if function_name == "contains":
            if len(args) != 2:
                raise QueryExecutionError("contains() requires 2 arguments")
            collection, value = args
            if isinstance(collection, list):
                return value in collection
            elif isinstance(collection, str):
                return str(value).lower() in collection.lower()
            return False

        elif function_name == "length":
            if len(args) != 1:
                raise QueryExecutionError("length() requires 1 argument")
            value = args[0]
            if hasattr(value, "__len__"):
                return len(value)
            return 0

        elif function_name == "lower":
            if len(args) != 1:
                raise QueryExecutionError("lower() requires 1 argument")
            value = args[0]
            if value and hasattr(value, "lower"):
                return value.lower()
            return value

        elif function_name == "upper":
            if len(args) != 1:
                raise QueryExecutionError("upper() requires 1 argument")
            value = args[0]
            if value and hasattr(value, "upper"):
                return value.upper()
            return value

        elif function_name == "date":
            if len(args) != 1 or not isinstance(args[0], str):
                raise QueryExecutionError("date() requires 1 string argument")
            value = _to_date(args[0])
            if value is None:
                raise QueryExecutionError(f"date() cannot parse {args[0]!r}")
            return value

        elif function_name == "today":
            if args:
                raise QueryExecutionError("today() takes no arguments")
            return self.search_info.today

        else:
            raise QueryExecutionError(f"Unknown function: {function_name}")
