"""Parser entry points for mvscript source text.

Each ``parse_*`` method applies one grammar production at a character
offset and returns ``(node, new_offset)``; ``parse`` drives the statement
production over a whole file.
"""

from __future__ import annotations

from typing import Any

from mvscript import grammar
from mvscript.ast_nodes import (
    Declaration,
    Expression,
    ExpressionStmt,
    Program,
    Statement,
    TypeName,
)
from mvscript.combinators import Parser as Production, eof

ENTRY_POINTS = ("program", "statement", "expression", "declaration")

_PRODUCTIONS: dict[str, Production[Any]] = {
    "statement": grammar.statement,
    "expression": grammar.expression,
    "declaration": grammar.declaration,
}


class Parser:
    """Parses mvscript source text into AST nodes."""

    def __init__(self, source: str, filename: str = "<stdin>") -> None:
        self.source = source
        self.filename = filename

    def _apply(self, production: Production[Any], pos: int) -> tuple[Any, int]:
        return production.parse(self.source, pos, self.filename)

    def parse_statement(self, pos: int = 0) -> tuple[Statement, int]:
        return self._apply(grammar.statement, pos)

    def parse_expression(self, pos: int = 0) -> tuple[Expression, int]:
        return self._apply(grammar.expression, pos)

    def parse_declaration(self, pos: int = 0) -> tuple[Declaration, int]:
        return self._apply(grammar.declaration, pos)

    def parse_type_name(self, pos: int = 0) -> tuple[TypeName, int]:
        return self._apply(grammar.type_name, pos)

    def skip_whitespace(self, pos: int = 0) -> int:
        _, pos = self._apply(grammar.whitespace, pos)
        return pos

    def parse(self) -> Program:
        """Parse every statement in the source into a Program.

        Leading whitespace is skipped here; a bare expression statement may
        be followed by an optional ";".
        """
        statements: list[Statement] = []
        pos = self.skip_whitespace()
        while pos < len(self.source):
            stmt, pos = self.parse_statement(pos)
            if isinstance(stmt, ExpressionStmt):
                _, pos = self._apply(grammar.statement_separator, pos)
            statements.append(stmt)
        return Program(tuple(statements), self.filename)

    def parse_entry(self, entry: str) -> Any:
        """Parse the whole source with the named entry point.

        For entries other than "program" the production must cover all the
        input after leading whitespace.
        """
        if entry == "program":
            return self.parse()
        if entry not in _PRODUCTIONS:
            raise ValueError(f"unknown entry point {entry!r}, expected one of {ENTRY_POINTS}")
        node, _ = self._apply(_PRODUCTIONS[entry] << eof, self.skip_whitespace())
        return node
