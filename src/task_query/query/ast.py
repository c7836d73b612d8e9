"""
Abstract Syntax Tree (AST) definitions for query expressions.

Expressions appear after ``filter by``, ``sort by function`` and
``group by function``.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class ExpressionNode:
    """Base class for expression nodes in the AST."""

    pass


@dataclass
class LiteralNode(ExpressionNode):
    """Literal value (string, number, boolean, null)."""

    value: Any


@dataclass
class FieldNode(ExpressionNode):
    """Field reference (e.g., 'task.due', 'query.file.path')."""

    field_name: str


@dataclass
class UnaryOpNode(ExpressionNode):
    """Unary operation (NOT)."""

    operator: str
    operand: ExpressionNode


@dataclass
class BinaryOpNode(ExpressionNode):
    """Binary operation (e.g., 'task.status.type = "DONE"', 'task.due < today()')."""

    operator: str  # =, !=, <, >, <=, >=, AND, OR
    left: ExpressionNode
    right: ExpressionNode


@dataclass
class FunctionCallNode(ExpressionNode):
    """Function call (e.g., 'contains(task.tags, "#home")')."""

    function_name: str
    arguments: list[ExpressionNode]
