"""Source file representation and span tracking for diagnostics."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """A range within a source file."""

    file: str
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def __str__(self) -> str:
        return f"{self.file}:{self.start_line}:{self.start_col}"


def line_col(text: str, offset: int) -> tuple[int, int]:
    """Map a character offset to a 1-indexed (line, column) pair."""
    offset = max(0, min(offset, len(text)))
    line = text.count("\n", 0, offset) + 1
    col = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, col


def span_of(filename: str, text: str, start: int, end: int | None = None) -> Span:
    """Build a Span covering text[start:end] (a single column when end is None)."""
    start_line, start_col = line_col(text, start)
    if end is None or end <= start:
        return Span(filename, start_line, start_col, start_line, start_col)
    end_line, end_col = line_col(text, end - 1)
    return Span(filename, start_line, start_col, end_line, end_col)
