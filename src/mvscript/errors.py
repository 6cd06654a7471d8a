"""Rust-style colored diagnostic rendering and the parser's error types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from mvscript.source import Span, span_of


class Severity(Enum):
    ERROR = "error"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

PARSE_ERROR_CODE = "E100"


@dataclass(frozen=True)
class DiagnosticLabel:
    """Points to a specific source location."""

    span: Span
    message: str


@dataclass
class Diagnostic:
    """A single diagnostic message with optional labels and suggestions."""

    severity: Severity
    code: str
    message: str
    labels: list[DiagnosticLabel] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


class DiagnosticRenderer:
    """Renders diagnostics in Rust-style format with colors.

    Source lines are taken from texts registered with ``add_source`` first,
    falling back to reading the labelled file from disk.
    """

    def __init__(self, *, color: bool = True) -> None:
        self.color = color
        self._file_cache: dict[str, list[str]] = {}

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def add_source(self, filename: str, text: str) -> None:
        """Register in-memory source text (e.g. stdin) under a filename."""
        self._file_cache[filename] = text.splitlines()

    def _get_source_line(self, filename: str, line_num: int) -> str | None:
        """Load and cache source file, return the 1-indexed line."""
        if filename not in self._file_cache:
            try:
                path = Path(filename)
                if path.is_file():
                    self._file_cache[filename] = path.read_text(encoding="utf-8").splitlines()
                else:
                    self._file_cache[filename] = []
            except (OSError, UnicodeDecodeError):
                self._file_cache[filename] = []
        lines = self._file_cache[filename]
        if 1 <= line_num <= len(lines):
            return lines[line_num - 1]
        return None

    def render(self, diag: Diagnostic) -> str:
        lines: list[str] = []
        sev = diag.severity
        color = _COLORS[sev]

        # Header: error[E100]: message
        lines.append(
            f"{self._c(color)}{sev.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        )

        for label in diag.labels:
            span = label.span
            lines.append(f"  {self._c(_BLUE)}-->{self._c(_RESET)} {span}")
            gutter = f"{span.start_line:>4}"
            lines.append(f"  {self._c(_BLUE)}   |{self._c(_RESET)}")

            source_line = self._get_source_line(span.file, span.start_line)
            if source_line is not None:
                lines.append(
                    f"  {self._c(_BLUE)}{gutter} |{self._c(_RESET)} {source_line}"
                )
                if span.start_line == span.end_line:
                    caret_len = max(1, span.end_col - span.start_col + 1)
                else:
                    caret_len = 1
                padding = " " * (span.start_col - 1)
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)} "
                    f"{padding}{self._c(color)}{'^' * caret_len}{self._c(_RESET)}"
                )

            if label.message:
                lines.append(
                    f"  {self._c(_BLUE)}   |{self._c(_RESET)}   "
                    f"{self._c(color)}{label.message}{self._c(_RESET)}"
                )

        for note in diag.notes:
            lines.append(f"  {self._c(_BLUE)}={self._c(_RESET)} note: {note}")

        return "\n".join(lines)


class CompileError(Exception):
    """Batch compilation error carrying multiple diagnostics."""

    def __init__(self, diagnostics: list[Diagnostic]) -> None:
        self.diagnostics = diagnostics
        messages = [d.message for d in diagnostics]
        super().__init__(f"{len(diagnostics)} error(s): {'; '.join(messages)}")


def describe_expected(expected: list[str]) -> str:
    """Join construct labels into "a", "a or b", "a, b or c"."""
    if not expected:
        return "nothing"
    if len(expected) == 1:
        return expected[0]
    return f"{', '.join(expected[:-1])} or {expected[-1]}"


class ParseError(CompileError):
    """Parse failure at a character offset, expecting one of a set of constructs."""

    def __init__(
        self,
        position: int,
        expected: list[str],
        text: str,
        filename: str = "<stdin>",
        *,
        message: str | None = None,
    ) -> None:
        self.position = position
        self.expected = expected
        self.filename = filename
        self.span = span_of(filename, text, position)
        if message is None:
            if position >= len(text):
                found = "end of input"
            else:
                found = repr(text[position])
            message = f"expected {describe_expected(expected)}, found {found}"
        notes: list[str] = []
        if position == 0 and text[:1] in (" ", "\t", "\n"):
            notes.append("leading whitespace is not skipped before the first token")
        diag = Diagnostic(
            severity=Severity.ERROR,
            code=PARSE_ERROR_CODE,
            message=message,
            labels=[DiagnosticLabel(span=self.span, message="")],
            notes=notes,
        )
        super().__init__([diag])
