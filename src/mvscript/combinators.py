"""Backtracking parser combinators over a character stream.

A parser is a step function from ``(text, pos)`` to a ``Success`` or a
``Failure``. Choice follows Parsec's committed-choice rule: an alternative
is only tried when the previous one failed *without consuming input*.
``attempt`` turns a consuming failure into a non-consuming one so the
caller may backtrack past it.

Failures are plain values while alternatives are explored; ``Parser.parse``
converts the final failure into a ``ParseError`` for callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from mvscript.errors import ParseError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    pos: int


@dataclass(frozen=True)
class Failure:
    pos: int
    expected: frozenset[str]
    consumed: bool


Result = Union[Success[Any], Failure]
StepFn = Callable[[str, int], Result]


def _merge(a: Failure, b: Failure) -> Failure:
    """Keep the failure that got further; union expectations on a tie."""
    if a.pos > b.pos:
        return a
    if b.pos > a.pos:
        return b
    return Failure(a.pos, a.expected | b.expected, a.consumed or b.consumed)


class Parser(Generic[T]):
    """A composable parser producing values of type T."""

    def __init__(self, step: StepFn, name: str | None = None) -> None:
        self._step = step
        self.name = name

    def __repr__(self) -> str:
        return f"<Parser {self.name or self._step.__name__}>"

    def run(self, text: str, pos: int = 0) -> Result:
        """Apply the parser at ``pos`` and return the raw step result."""
        return self._step(text, pos)

    def parse(self, text: str, pos: int = 0, filename: str = "<stdin>") -> tuple[T, int]:
        """Apply the parser, returning ``(value, new_pos)`` or raising ParseError.

        Input nested beyond the interpreter's recursion limit is reported as
        a ParseError at ``pos``.
        """
        try:
            result = self._step(text, pos)
        except RecursionError:
            raise ParseError(
                pos, [], text, filename, message="input is nested too deeply to parse",
            ) from None
        if isinstance(result, Failure):
            raise ParseError(result.pos, sorted(result.expected), text, filename)
        return result.value, result.pos

    # ── Derived parsers ──────────────────────────────────────────

    def map(self, fn: Callable[[T], U]) -> Parser[U]:
        def step(text: str, pos: int) -> Result:
            result = self._step(text, pos)
            if isinstance(result, Failure):
                return result
            return Success(fn(result.value), result.pos)

        return Parser(step, self.name)

    def bind(self, fn: Callable[[T], Parser[U]]) -> Parser[U]:
        """Run this parser, then the parser ``fn`` builds from its value."""

        def step(text: str, pos: int) -> Result:
            first = self._step(text, pos)
            if isinstance(first, Failure):
                return first
            second = fn(first.value)._step(text, first.pos)
            if isinstance(second, Failure):
                return Failure(
                    second.pos, second.expected, second.consumed or first.pos > pos,
                )
            return second

        return Parser(step, self.name)

    def label(self, name: str) -> Parser[T]:
        """Report a non-consuming failure as "expected <name>" at the start."""

        def step(text: str, pos: int) -> Result:
            result = self._step(text, pos)
            if isinstance(result, Failure) and not result.consumed:
                return Failure(pos, frozenset({name}), False)
            return result

        return Parser(step, name)

    def __rshift__(self, other: Parser[U]) -> Parser[U]:
        return _pair(self, other, keep_left=False)

    def __lshift__(self, other: Parser[Any]) -> Parser[T]:
        return _pair(self, other, keep_left=True)

    def __or__(self, other: Parser[U]) -> Parser[T | U]:
        return choice(self, other)


class Forward(Parser[T]):
    """A parser referenced before it is defined, for recursive productions.

    ``define`` installs the target's step function directly, so recursion
    through a Forward adds no stack frame of its own.
    """

    def __init__(self, name: str) -> None:
        super().__init__(self._undefined, name)

    def define(self, parser: Parser[T]) -> None:
        self._step = parser._step

    def _undefined(self, text: str, pos: int) -> Result:
        raise RuntimeError(f"parser {self.name!r} used before it was defined")


def _pair(first: Parser[Any], second: Parser[Any], *, keep_left: bool) -> Parser[Any]:
    """Sequence two parsers in one stack frame, keeping one of their values."""

    def step(text: str, pos: int) -> Result:
        left = first._step(text, pos)
        if isinstance(left, Failure):
            return left
        right = second._step(text, left.pos)
        if isinstance(right, Failure):
            return Failure(right.pos, right.expected, right.consumed or left.pos > pos)
        return Success(left.value if keep_left else right.value, right.pos)

    return Parser(step, first.name)


# ── Primitives ───────────────────────────────────────────────────


def satisfy(pred: Callable[[str], bool], label: str) -> Parser[str]:
    """Match one character for which ``pred`` holds."""

    def step(text: str, pos: int) -> Result:
        if pos < len(text) and pred(text[pos]):
            return Success(text[pos], pos + 1)
        return Failure(pos, frozenset({label}), False)

    return Parser(step, label)


def char(c: str) -> Parser[str]:
    return satisfy(lambda ch: ch == c, repr(c))


def one_of(chars: str, label: str | None = None) -> Parser[str]:
    return satisfy(lambda ch: ch in chars, label or f"one of {chars!r}")


def none_of(chars: str, label: str | None = None) -> Parser[str]:
    return satisfy(lambda ch: ch not in chars, label or f"none of {chars!r}")


def string(s: str) -> Parser[str]:
    """Match ``s`` exactly. A partial match fails without consuming input."""

    def step(text: str, pos: int) -> Result:
        if text.startswith(s, pos):
            return Success(s, pos + len(s))
        return Failure(pos, frozenset({repr(s)}), False)

    return Parser(step, repr(s))


digit = satisfy(lambda ch: ch in "0123456789", "digit")
letter = satisfy(str.isalpha, "letter")


def pure(value: T) -> Parser[T]:
    """Succeed with ``value`` without consuming input."""
    return Parser(lambda text, pos: Success(value, pos), "pure")


def _eof(text: str, pos: int) -> Result:
    if pos >= len(text):
        return Success(None, pos)
    return Failure(pos, frozenset({"end of input"}), False)


eof: Parser[None] = Parser(_eof, "end of input")


def not_followed_by(parser: Parser[Any], label: str) -> Parser[None]:
    """Succeed, consuming nothing, only when ``parser`` does not match here."""

    def step(text: str, pos: int) -> Result:
        if isinstance(parser._step(text, pos), Success):
            return Failure(pos, frozenset({label}), False)
        return Success(None, pos)

    return Parser(step, f"not {label}")


# ── Combinators ──────────────────────────────────────────────────


def seq(*parsers: Parser[Any]) -> Parser[tuple[Any, ...]]:
    """Run parsers in order, collecting their values into a tuple."""

    def step(text: str, pos: int) -> Result:
        values: list[Any] = []
        cur = pos
        for parser in parsers:
            result = parser._step(text, cur)
            if isinstance(result, Failure):
                return Failure(result.pos, result.expected, result.consumed or cur > pos)
            values.append(result.value)
            cur = result.pos
        return Success(tuple(values), cur)

    return Parser(step, "seq")


def choice(*parsers: Parser[Any]) -> Parser[Any]:
    """Try each parser in turn until one succeeds or one commits by consuming."""
    if not parsers:
        raise ValueError("choice() needs at least one alternative")

    def step(text: str, pos: int) -> Result:
        error: Failure | None = None
        for parser in parsers:
            result = parser._step(text, pos)
            if isinstance(result, Success) or result.consumed:
                return result
            error = result if error is None else _merge(error, result)
        assert error is not None
        return error

    return Parser(step, "choice")


def attempt(parser: Parser[T]) -> Parser[T]:
    """Parsec ``try``: on failure, pretend no input was consumed."""

    def step(text: str, pos: int) -> Result:
        result = parser._step(text, pos)
        if isinstance(result, Failure) and result.consumed:
            return Failure(result.pos, result.expected, False)
        return result

    return Parser(step, parser.name)


def many(parser: Parser[T]) -> Parser[list[T]]:
    """Zero or more repetitions. A consuming failure inside is propagated."""

    def step(text: str, pos: int) -> Result:
        values: list[T] = []
        cur = pos
        while True:
            result = parser._step(text, cur)
            if isinstance(result, Failure):
                if result.consumed:
                    return result
                return Success(values, cur)
            if result.pos == cur:
                raise ValueError(f"many() applied to {parser!r}, which accepts empty input")
            values.append(result.value)
            cur = result.pos

    return Parser(step, parser.name)


def many1(parser: Parser[T]) -> Parser[list[T]]:
    return seq(parser, many(parser)).map(lambda pair: [pair[0], *pair[1]])


def option_maybe(parser: Parser[T]) -> Parser[T | None]:
    return choice(parser, pure(None))


def between(open_: Parser[Any], close: Parser[Any], parser: Parser[T]) -> Parser[T]:
    """``open_``, then ``parser``, then ``close``; keeps the middle value."""

    def step(text: str, pos: int) -> Result:
        cur = pos
        for part in (open_, parser, close):
            result = part._step(text, cur)
            if isinstance(result, Failure):
                return Failure(result.pos, result.expected, result.consumed or cur > pos)
            if part is parser:
                value = result.value
            cur = result.pos
        return Success(value, cur)

    return Parser(step, parser.name)


def chainl1(
    operand: Parser[T],
    operator: Parser[Callable[[T, T], T]],
) -> Parser[T]:
    """One or more operands separated by operators, folded strictly left to right.

    ``a op1 b op2 c`` yields ``op2(op1(a, b), c)`` whatever the operators are.
    """

    def step(text: str, pos: int) -> Result:
        first = operand._step(text, pos)
        if isinstance(first, Failure):
            return first
        acc, cur = first.value, first.pos
        while True:
            op = operator._step(text, cur)
            if isinstance(op, Failure):
                if op.consumed:
                    return op
                return Success(acc, cur)
            rhs = operand._step(text, op.pos)
            if isinstance(rhs, Failure):
                return Failure(rhs.pos, rhs.expected, rhs.consumed or op.pos > pos)
            acc, cur = op.value(acc, rhs.value), rhs.pos

    return Parser(step, "chainl1")
