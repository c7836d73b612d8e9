"""
Detector for task query blocks in markdown content.
"""

import re
from dataclasses import dataclass


@dataclass
class QueryBlock:
    """A detected ```tasks query block."""

    query: str
    start_line: int
    end_line: int

    def __repr__(self) -> str:
        return f"QueryBlock(lines={self.start_line}-{self.end_line})"


class QueryBlockDetector:
    """Detects ```tasks code blocks in markdown content."""

    CODEBLOCK_START = re.compile(r"^\s*```tasks\s*$")
    CODEBLOCK_END = re.compile(r"^\s*```\s*$")

    @classmethod
    def detect_queries(cls, content: str) -> list[QueryBlock]:
        """
        Detect all query blocks in markdown content.

        Returns:
            List of QueryBlock objects containing query text and location.
            An unterminated block is ignored.
        """
        blocks = []
        lines = content.split("\n")
        i = 0

        while i < len(lines):
            if cls.CODEBLOCK_START.match(lines[i]):
                start_line = i
                query_lines = []
                i += 1

                # Collect query lines until we hit the closing ```
                while i < len(lines):
                    if cls.CODEBLOCK_END.match(lines[i]):
                        blocks.append(
                            QueryBlock(
                                query="\n".join(query_lines),
                                start_line=start_line,
                                end_line=i,
                            )
                        )
                        break
                    query_lines.append(lines[i])
                    i += 1

            i += 1

        return blocks

    @classmethod
    def has_queries(cls, content: str) -> bool:
        return bool(cls.detect_queries(content))
