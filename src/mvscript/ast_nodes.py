"""AST node definitions for mvscript.

Nodes are frozen dataclasses compared structurally, so re-parsing the same
text (or the same text with different spacing) yields equal trees.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

# ── Literal values ───────────────────────────────────────────────


@dataclass(frozen=True)
class Int:
    value: int


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Bool:
    value: bool


Literal = Union[Int, Float, String, Bool]


# ── Type names ───────────────────────────────────────────────────


class TypeName(Enum):
    """Declared-type keywords usable in a `let x: <type>` annotation.

    POINT, VECTOR and MATRIX have no literal syntax.
    """

    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    STRING = "string"
    POINT = "point"
    VECTOR = "vector"
    MATRIX = "matrix"


# ── Operators ────────────────────────────────────────────────────


class Operator(Enum):
    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    INT_DIVIDE = "//"
    GREATER_THAN = ">"
    LESS_THAN = "<"
    EQUALS = "=="
    NOT_EQUALS = "!="
    GREATER_THAN_EQ = ">="
    LESS_THAN_EQ = "<="
    AND = "&&"
    OR = "||"
    BITWISE_AND = "&"
    BITWISE_OR = "|"
    BITWISE_XOR = "^"


# ── Expressions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class LiteralExpr:
    value: Literal


@dataclass(frozen=True)
class VarIdentifier:
    name: str


@dataclass(frozen=True)
class Parentheses:
    inner: Expression


@dataclass(frozen=True)
class Operation:
    op: Operator
    left: Expression
    right: Expression


Expression = Union[LiteralExpr, VarIdentifier, Parentheses, Operation]


# ── Declarations ─────────────────────────────────────────────────


@dataclass(frozen=True)
class Variable:
    """`let name[: type_name] [= initializer];`"""

    name: str
    type_name: TypeName | None
    initializer: Expression | None


Declaration = Variable


# ── Statements ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DeclarationStmt:
    declaration: Declaration


@dataclass(frozen=True)
class ExpressionStmt:
    expression: Expression


Statement = Union[DeclarationStmt, ExpressionStmt]


@dataclass(frozen=True)
class Program:
    """All statements of a source file, in order."""

    statements: tuple[Statement, ...]
    filename: str = "<stdin>"
