"""
Parser for query expressions.

Converts tokens into an Abstract Syntax Tree (AST).
"""

from task_query.errors import QuerySyntaxError
from task_query.query.ast import (
    BinaryOpNode,
    ExpressionNode,
    FieldNode,
    FunctionCallNode,
    LiteralNode,
    UnaryOpNode,
)
from task_query.query.lexer import ExpressionLexer, Token, TokenType

COMPARISON_TOKENS = [
    TokenType.EQUALS,
    TokenType.NOT_EQUALS,
    TokenType.LESS_THAN,
    TokenType.GREATER_THAN,
    TokenType.LESS_EQUAL,
    TokenType.GREATER_EQUAL,
]


class ExpressionParser:
    """Recursive-descent parser for query expressions."""

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    @classmethod
    def parse(cls, expression_text: str) -> ExpressionNode:
        """Parse an expression string into an AST."""
        lexer = ExpressionLexer(expression_text)
        tokens = lexer.tokenize()
        parser = cls(tokens)
        expression = parser._parse_expression()
        if not parser._is_at_end():
            raise QuerySyntaxError(
                f"Unexpected token after expression: {parser._current().value}",
                parser._current().column,
            )
        return expression

    def _parse_expression(self) -> ExpressionNode:
        """Parse an expression (handles operator precedence)."""
        if self._is_at_end():
            raise QuerySyntaxError("Expected an expression", self._current().column)
        return self._parse_or_expression()

    def _parse_or_expression(self) -> ExpressionNode:
        """Parse OR expression."""
        left = self._parse_and_expression()

        while self._check(TokenType.OR):
            op_token = self._advance()
            right = self._parse_and_expression()
            left = BinaryOpNode(operator=op_token.value, left=left, right=right)

        return left

    def _parse_and_expression(self) -> ExpressionNode:
        """Parse AND expression."""
        left = self._parse_not_expression()

        while self._check(TokenType.AND):
            op_token = self._advance()
            right = self._parse_not_expression()
            left = BinaryOpNode(operator=op_token.value, left=left, right=right)

        return left

    def _parse_not_expression(self) -> ExpressionNode:
        """Parse NOT expression."""
        if self._check(TokenType.NOT):
            op_token = self._advance()
            return UnaryOpNode(operator=op_token.value, operand=self._parse_not_expression())
        return self._parse_comparison_expression()

    def _parse_comparison_expression(self) -> ExpressionNode:
        """Parse comparison expression."""
        left = self._parse_primary_expression()

        if self._check_any(COMPARISON_TOKENS):
            op_token = self._advance()
            right = self._parse_primary_expression()
            return BinaryOpNode(operator=op_token.value, left=left, right=right)

        return left

    def _parse_primary_expression(self) -> ExpressionNode:
        """Parse primary expression (literals, fields, function calls)."""
        # String literal
        if self._check(TokenType.STRING):
            return LiteralNode(value=self._advance().value)

        # Number literal
        if self._check(TokenType.NUMBER):
            value = self._advance().value
            # Convert to int or float
            if "." in value:
                return LiteralNode(value=float(value))
            return LiteralNode(value=int(value))

        # Boolean literal
        if self._check(TokenType.BOOLEAN):
            return LiteralNode(value=self._advance().value.lower() == "true")

        # Null literal
        if self._check(TokenType.NULL):
            self._advance()
            return LiteralNode(value=None)

        # Field path (e.g., task.due)
        if self._check(TokenType.FIELD_PATH):
            return FieldNode(field_name=self._advance().value)

        # Identifier (could be field or function call)
        if self._check(TokenType.IDENTIFIER):
            name = self._advance().value

            if self._check(TokenType.LPAREN):
                self._advance()
                args = self._parse_function_arguments()
                if not self._check(TokenType.RPAREN):
                    raise QuerySyntaxError(
                        "Expected ')' after function arguments",
                        self._current().column,
                    )
                self._advance()
                return FunctionCallNode(function_name=name, arguments=args)

            return FieldNode(field_name=name)

        # Parenthesized expression
        if self._check(TokenType.LPAREN):
            self._advance()
            expr = self._parse_expression()
            if not self._check(TokenType.RPAREN):
                raise QuerySyntaxError(
                    "Expected ')' after expression",
                    self._current().column,
                )
            self._advance()
            return expr

        raise QuerySyntaxError(
            f"Unexpected token: {self._current().value or 'end of expression'}",
            self._current().column,
        )

    def _parse_function_arguments(self) -> list[ExpressionNode]:
        """Parse function arguments."""
        args: list[ExpressionNode] = []

        if self._check(TokenType.RPAREN):
            return args

        args.append(self._parse_expression())

        while self._check(TokenType.COMMA):
            self._advance()
            args.append(self._parse_expression())

        return args

    # Helper methods

    def _current(self) -> Token:
        """Get the current token."""
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]  # Return EOF

    def _advance(self) -> Token:
        """Advance to the next token."""
        token = self._current()
        if not self._is_at_end():
            self.pos += 1
        return token

    def _check(self, token_type: TokenType) -> bool:
        """Check if current token matches the given type."""
        if self._is_at_end():
            return False
        return self._current().type == token_type

    def _check_any(self, token_types: list[TokenType]) -> bool:
        """Check if current token matches any of the given types."""
        return any(self._check(t) for t in token_types)

    def _is_at_end(self) -> bool:
        """Check if we're at the end of tokens."""
        return self._current().type == TokenType.EOF
