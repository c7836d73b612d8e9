"""
Tokenizer for the single-line expressions of ``filter by`` and the function sorters and groupers.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto

from task_query.errors import QuerySyntaxError


class TokenType(Enum):
    """Token types for query expressions."""

    # Operators
    AND = auto()
    OR = auto()
    NOT = auto()
    EQUALS = auto()  # = or ==
    NOT_EQUALS = auto()  # !=
    LESS_THAN = auto()  # <
    GREATER_THAN = auto()  # >
    LESS_EQUAL = auto()  # <=
    GREATER_EQUAL = auto()  # >=

    # Literals
    STRING = auto()
    NUMBER = auto()
    BOOLEAN = auto()
    NULL = auto()

    # Identifiers and paths
    IDENTIFIER = auto()
    FIELD_PATH = auto()  # e.g., task.due, query.file.path

    # Punctuation
    COMMA = auto()
    LPAREN = auto()
    RPAREN = auto()

    EOF = auto()


@dataclass
class Token:
    """A token and the one-based column it starts at."""

    type: TokenType
    value: str
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, col {self.column})"


WHITESPACE = re.compile(r"\s+")
NUMBER = re.compile(r"-?\d+(?:\.\d*)?")
WORD = re.compile(r"[^\W\d][\w.\-]*")
STRING_BODY = {
    '"': re.compile(r'((?:[^"\\]|\\.)*)"', re.DOTALL),
    "'": re.compile(r"((?:[^'\\]|\\.)*)'", re.DOTALL),
}
ESCAPE = re.compile(r"\\(.)", re.DOTALL)

# Longest first so "<=" is not read as "<"
SYMBOLS = {
    "!=": TokenType.NOT_EQUALS,
    "<=": TokenType.LESS_EQUAL,
    ">=": TokenType.GREATER_EQUAL,
    "==": TokenType.EQUALS,
    "=": TokenType.EQUALS,
    "<": TokenType.LESS_THAN,
    ">": TokenType.GREATER_THAN,
    ",": TokenType.COMMA,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


class ExpressionLexer:
    """Tokenizer for query expressions."""

    KEYWORDS = {
        "AND": TokenType.AND,
        "OR": TokenType.OR,
        "NOT": TokenType.NOT,
        "TRUE": TokenType.BOOLEAN,
        "FALSE": TokenType.BOOLEAN,
        "NULL": TokenType.NULL,
    }

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.tokens: list[Token] = []

    def tokenize(self) -> list[Token]:
        """Tokenize the entire input."""
        while True:
            if match := WHITESPACE.match(self.text, self.pos):
                self.pos = match.end()
            if self.pos >= len(self.text):
                break
            self._next_token()

        self.tokens.append(Token(TokenType.EOF, "", self.pos + 1))
        return self.tokens

    def _next_token(self):
        start = self.pos
        char = self.text[start]

        if char in STRING_BODY:
            match = STRING_BODY[char].match(self.text, start + 1)
            if not match:
                raise QuerySyntaxError("Unterminated string", start + 1)
            self._emit(TokenType.STRING, ESCAPE.sub(r"\1", match.group(1)), start, match.end())
            return

        if match := NUMBER.match(self.text, start):
            self._emit(TokenType.NUMBER, match.group(), start, match.end())
            return

        for symbol, token_type in SYMBOLS.items():
            if self.text.startswith(symbol, start):
                self._emit(token_type, "=" if symbol == "==" else symbol, start, start + len(symbol))
                return

        if match := WORD.match(self.text, start):
            self._emit_word(match.group(), start, match.end())
            return

        raise QuerySyntaxError(f"Unexpected character '{char}'", start + 1)

    def _emit_word(self, word: str, start: int, end: int):
        token_type = self.KEYWORDS.get(word.upper())
        if token_type is None:
            token_type = TokenType.FIELD_PATH if "." in word else TokenType.IDENTIFIER
        elif token_type is not TokenType.BOOLEAN:
            word = word.upper()
        self._emit(token_type, word, start, end)

    def _emit(self, token_type: TokenType, value: str, start: int, end: int):
        self.tokens.append(Token(token_type, value, start + 1))
        self.pos = end
