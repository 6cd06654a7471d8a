"""Grammar productions for mvscript statements, declarations and expressions.

There is no separate lexer: every terminal is wrapped in ``lexeme`` so the
whitespace after it is consumed before the next rule looks at the input.
Whitespace *before* the first token is not skipped; callers that want that
must run ``whitespace`` themselves.

Binary operators have no precedence: ``expression`` folds every operator
strictly left to right, so ``1 + 2 * 3`` is ``(1 + 2) * 3``.
"""

from __future__ import annotations

from typing import Any, Callable

from mvscript.ast_nodes import (
    Bool,
    Declaration,
    DeclarationStmt,
    Expression,
    ExpressionStmt,
    Float,
    Int,
    Literal,
    LiteralExpr,
    Operation,
    Operator,
    Parentheses,
    Statement,
    String,
    TypeName,
    VarIdentifier,
    Variable,
)
from mvscript.combinators import (
    Forward,
    Parser,
    attempt,
    between,
    chainl1,
    char,
    choice,
    digit,
    letter,
    many,
    many1,
    none_of,
    not_followed_by,
    one_of,
    option_maybe,
    pure,
    seq,
    string,
)

# ── Whitespace & lexemes ─────────────────────────────────────────

whitespace: Parser[None] = many(one_of(" \n\t", "whitespace")).map(lambda _: None)


def lexeme(parser: Parser[Any]) -> Parser[Any]:
    """Run ``parser`` then skip trailing whitespace, keeping the parser's value."""
    return parser << whitespace


_ident_start = letter | char("_")
_ident_char = _ident_start | digit


def keyword(word: str) -> Parser[str]:
    """Match ``word`` unless it is only the prefix of a longer identifier."""
    return lexeme(
        attempt(string(word) << not_followed_by(_ident_char, "identifier character"))
        .label(repr(word))
    )


def symbol(c: str) -> Parser[str]:
    return lexeme(char(c))


# ── Literals ─────────────────────────────────────────────────────


def _digits(chars: list[str]) -> str:
    return "".join(chars)


_DIGIT_CHUNK = 1000


def _decimal(chars: list[str]) -> int:
    """Convert a digit run of any length, staying under ``int()``'s digit limit."""
    digits = _digits(chars)
    value = 0
    for i in range(0, len(digits), _DIGIT_CHUNK):
        chunk = digits[i:i + _DIGIT_CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


integer: Parser[Literal] = lexeme(many1(digit)).map(lambda ds: Int(_decimal(ds)))

# At least one digit before the point; digits after it are optional ("3." is 3.0).
float_literal: Parser[Literal] = lexeme(
    seq(many1(digit), char("."), many(digit))
).map(lambda parts: Float(float(f"{_digits(parts[0])}.{_digits(parts[2])}")))

# The float attempt must not leave its integer part consumed when no "." follows.
number: Parser[Expression] = (
    (attempt(float_literal) | integer).map(LiteralExpr).label("number")
)

# No escape sequences: the literal ends at the next double quote.
string_literal: Parser[Expression] = (
    (char('"') >> many(none_of('"', "string character")) << lexeme(char('"')))
    .map(lambda chars: LiteralExpr(String("".join(chars))))
    .label("string")
)

boolean: Parser[Expression] = (
    (keyword("true") >> pure(True)) | (keyword("false") >> pure(False))
).map(lambda value: LiteralExpr(Bool(value))).label("boolean")

literal: Parser[Expression] = choice(number, string_literal, boolean)

# ── Identifiers & type names ─────────────────────────────────────

identifier: Parser[str] = lexeme(
    seq(_ident_start, many(_ident_char)).map(lambda parts: parts[0] + "".join(parts[1]))
).label("identifier")

var_identifier: Parser[Expression] = identifier.map(VarIdentifier)

type_name: Parser[TypeName] = choice(
    *(keyword(tn.value) >> pure(tn) for tn in TypeName)
).label("type name")

# ── Operators ────────────────────────────────────────────────────

# Every multi-character operator precedes the single-character operators
# that are its prefix: "//" before "/", ">=" before ">", "&&" before "&".
OPERATOR_ORDER: tuple[Operator, ...] = (
    Operator.INT_DIVIDE,
    Operator.EQUALS,
    Operator.NOT_EQUALS,
    Operator.GREATER_THAN_EQ,
    Operator.LESS_THAN_EQ,
    Operator.AND,
    Operator.OR,
    Operator.ADD,
    Operator.SUBTRACT,
    Operator.MULTIPLY,
    Operator.DIVIDE,
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.BITWISE_AND,
    Operator.BITWISE_OR,
    Operator.BITWISE_XOR,
)

Combine = Callable[[Expression, Expression], Expression]


def _combiner(op: Operator) -> Combine:
    def combine(left: Expression, right: Expression) -> Expression:
        return Operation(op, left, right)

    return combine


operator: Parser[Combine] = lexeme(
    choice(*(string(op.value) >> pure(_combiner(op)) for op in OPERATOR_ORDER))
).label("operator")

# ── Terms & expressions ──────────────────────────────────────────

expression: Forward[Expression] = Forward("expression")

parens: Parser[Expression] = between(symbol("("), symbol(")"), expression).map(Parentheses)

# Literals go first so "true", "false" and digits never become identifiers.
term: Parser[Expression] = choice(literal, parens, var_identifier)

expression.define(chainl1(term, operator))

# ── Declarations & statements ────────────────────────────────────

type_annotation: Parser[TypeName | None] = option_maybe(symbol(":") >> type_name)

# "=" commits to the initializer form; a bare ";" means no initializer.
initializer: Parser[Expression | None] = choice(
    symbol("=") >> expression << symbol(";"),
    symbol(";") >> pure(None),
)

declaration: Parser[Declaration] = seq(
    keyword("let") >> identifier,
    type_annotation,
    initializer,
).map(lambda parts: Variable(*parts))

statement: Parser[Statement] = (
    attempt(declaration.map(DeclarationStmt)) | expression.map(ExpressionStmt)
)

# Optional ";" after a bare expression statement, consumed by the program driver.
statement_separator: Parser[str | None] = option_maybe(symbol(";"))
