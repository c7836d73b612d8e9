"""
Statements: single instruction lines of a query.
"""

from dataclasses import dataclass

COMMENT_MARKER = "#"
CONTINUATION = "\\"


@dataclass(frozen=True)
class Statement:
    """One instruction of a query.

    Attributes:
        raw_instruction: The instruction as written, continuation lines joined
        any_placeholders_expanded: The instruction after placeholder expansion
        source: The full query text the instruction came from
        line_number: Zero-based line of the instruction's first line in ``source``
    """

    raw_instruction: str
    any_placeholders_expanded: str
    source: str = ""
    line_number: int = 0

    @classmethod
    def of(cls, instruction: str) -> "Statement":
        return cls(instruction, instruction, instruction)

    def with_expansion(self, expanded: str) -> "Statement":
        return Statement(self.raw_instruction, expanded, self.source, self.line_number)

    def explain(self) -> str:
        if self.raw_instruction == self.any_placeholders_expanded:
            return self.raw_instruction
        return f"{self.raw_instruction} =>\n{self.any_placeholders_expanded}"

    def __str__(self) -> str:
        return self.any_placeholders_expanded


def split_statements(source: str) -> list[Statement]:
    """Split a query into statements.

    Lines are trimmed; blank lines and ``#`` comments are skipped; a line
    ending in a backslash continues on the next line. A doubled backslash
    is a literal backslash.
    """
    statements: list[Statement] = []
    pending: list[str] = []
    first_line = 0

    lines = source.split("\n")
    for line_number, raw_line in enumerate(lines):
        line = raw_line.strip()
        if not pending:
            first_line = line_number

        if line.endswith(CONTINUATION) and not line.endswith(CONTINUATION * 2):
            pending.append(line[:-1].strip())
            continue

        if line.endswith(CONTINUATION * 2):
            line = line[:-1]

        if pending:
            pending.append(line)
            line = " ".join(part for part in pending if part)
            pending = []

        if not line or line.startswith(COMMENT_MARKER):
            continue
        statements.append(Statement(line, line, source, first_line))

    if pending:
        line = " ".join(part for part in pending if part)
        if line and not line.startswith(COMMENT_MARKER):
            statements.append(Statement(line, line, source, first_line))

    return statements
