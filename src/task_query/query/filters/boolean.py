"""
Boolean combinations of filters.

Sub-filters are wrapped in parentheses or double quotes and joined with
``AND``, ``OR``, ``XOR`` and ``NOT``::

    (due before tomorrow) AND NOT (tags include #someday)
    "path includes work" OR ((priority is high) XOR (is recurring))

Operators are upper case. Precedence, tightest first: NOT, AND, XOR, OR.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable

from task_query.errors import FilterParseError
from task_query.query.filters.field import FilterField
from task_query.query.filters.filter import Filter

OPERATOR = re.compile(r"(AND|OR|XOR|NOT)(?![\w])")
BOOLEAN_START = re.compile(r'^(?:\(|"|NOT[\s("])')

ParseLeaf = Callable[[str, date], Filter]


def looks_boolean(line: str) -> bool:
    return bool(BOOLEAN_START.match(line))


@dataclass
class _Token:
    kind: str  # "operand", "group" or "operator"
    text: str


def _closing_paren(line: str, start: int) -> int:
    depth = 0
    in_quote = False
    for index in range(start, len(line)):
        char = line[index]
        if char == '"':
            in_quote = not in_quote
        elif not in_quote:
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    return index
    raise FilterParseError(f"Unbalanced parentheses in: {line}")


def _tokenize(line: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(line):
        char = line[pos]
        if char.isspace():
            pos += 1
            continue

        if char == '"':
            end = line.find('"', pos + 1)
            if end == -1:
                raise FilterParseError(f"Unmatched quote in: {line}")
            tokens.append(_Token("operand", line[pos + 1 : end]))
            pos = end + 1
            continue

        if char == "(":
            end = _closing_paren(line, pos)
            tokens.append(_Token("group", line[pos + 1 : end]))
            pos = end + 1
            continue

        if char == ")":
            raise FilterParseError(f"Unbalanced parentheses in: {line}")

        if match := OPERATOR.match(line, pos):
            tokens.append(_Token("operator", match.group(1)))
            pos = match.end()
            continue

        word = line[pos:].split()[0]
        raise FilterParseError(
            f"Unexpected '{word}' in boolean filter; wrap sub-filters in ( ) or \" \": {line}"
        )
    return tokens


def _combine(operator: str, line: str, left: Filter, right: Filter) -> Filter:
    if operator == "AND":
        return Filter(
            line,
            lambda task, info: left.matches(task, info) and right.matches(task, info),
            "All of:",
            (left, right),
        )
    if operator == "XOR":
        return Filter(
            line,
            lambda task, info: left.matches(task, info) != right.matches(task, info),
            "Exactly one of:",
            (left, right),
        )
    return Filter(
        line,
        lambda task, info: left.matches(task, info) or right.matches(task, info),
        "At least one of:",
        (left, right),
    )


class _BooleanParser:
    """Recursive-descent parser over boolean tokens."""

    def __init__(self, line: str, today: date, parse_leaf: ParseLeaf):
        self.line = line
        self.today = today
        self.parse_leaf = parse_leaf
        self.tokens = _tokenize(line)
        self.pos = 0

    def parse(self) -> Filter:
        if not self.tokens:
            raise FilterParseError(f"Empty boolean filter: {self.line}")
        result = self._parse_or()
        if self.pos < len(self.tokens):
            raise FilterParseError(
                f"Unexpected '{self.tokens[self.pos].text}' in boolean filter: {self.line}"
            )
        return result

    def _parse_or(self) -> Filter:
        return self._parse_binary("OR", self._parse_xor)

    def _parse_xor(self) -> Filter:
        return self._parse_binary("XOR", self._parse_and)

    def _parse_and(self) -> Filter:
        return self._parse_binary("AND", self._parse_not)

    def _parse_binary(self, operator: str, operand: Callable[[], Filter]) -> Filter:
        left = operand()
        while self._check_operator(operator):
            self.pos += 1
            right = operand()
            left = _combine(operator, self.line, left, right)
        return left

    def _parse_not(self) -> Filter:
        if self._check_operator("NOT"):
            self.pos += 1
            operand = self._parse_not()
            return Filter(
                self.line,
                lambda task, info: not operand.matches(task, info),
                "None of:",
                (operand,),
            )
        return self._parse_primary()

    def _parse_primary(self) -> Filter:
        if self.pos >= len(self.tokens):
            raise FilterParseError(f"Boolean filter ends with an operator: {self.line}")

        token = self.tokens[self.pos]
        if token.kind == "operator":
            raise FilterParseError(f"Expected a sub-filter before '{token.text}': {self.line}")
        self.pos += 1

        text = token.text.strip()
        if not text:
            raise FilterParseError(f"Empty sub-filter in: {self.line}")
        if token.kind == "group" and looks_boolean(text):
            return _BooleanParser(text, self.today, self.parse_leaf).parse()
        try:
            return self.parse_leaf(text, self.today)
        except FilterParseError as e:
            raise FilterParseError(f"Could not interpret sub-filter '{text}': {e.message}") from e

    def _check_operator(self, operator: str) -> bool:
        return (
            self.pos < len(self.tokens)
            and self.tokens[self.pos].kind == "operator"
            and self.tokens[self.pos].text == operator
        )


class BooleanField(FilterField):
    """Filters combining sub-filters with boolean operators."""

    def __init__(self, parse_leaf: ParseLeaf):
        self.parse_leaf = parse_leaf

    def can_create_filter_for_line(self, line: str) -> bool:
        return looks_boolean(line)

    def create_filter(self, line: str, today: date) -> Filter:
        compiled = _BooleanParser(line, today, self.parse_leaf).parse()
        if compiled.instruction == line:
            return compiled
        # A single wrapped sub-filter such as "(done)"
        return Filter(line, compiled.predicate, compiled.explanation, compiled.children)
