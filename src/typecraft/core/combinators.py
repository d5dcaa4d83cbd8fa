"""
Ambiguity-preserving parser combinators.

A parser is a pure function from the remaining input to an ordered list of
``(value, remainder)`` alternatives. An empty list means failure. Nothing is
ever short-circuited: choice keeps the alternatives of both sides, and
repetition keeps every prefix, longest first, so callers can pick the first
alternative that consumed the whole input and diagnostics can look at how far
the others got.

Example:
    >>> many(char("t")).map("".join).run("tth")
    [('tt', 'h'), ('t', 'th'), ('', 'tth')]
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class Parser(Generic[T]):
    """A parser producing values of type ``T``."""

    __slots__ = ("_fn", "label")

    def __init__(self, fn: Callable[[str], list[tuple[T, str]]], label: str = "parser"):
        self._fn = fn
        self.label = label

    def __repr__(self) -> str:
        return f"<Parser {self.label}>"

    def run(self, text: str) -> list[tuple[T, str]]:
        """Run the parser, returning every alternative in preference order."""
        return self._fn(text)

    __call__ = run

    def bind(self, f: Callable[[T], Parser[U]]) -> Parser[U]:
        """Sequence: feed every alternative's value and remainder into ``f``."""

        def parse(text: str) -> list[tuple[U, str]]:
            out: list[tuple[U, str]] = []
            for value, rest in self._fn(text):
                out.extend(f(value)._fn(rest))
            return out

        return Parser(parse, self.label)

    flat_map = bind

    def map(self, f: Callable[[T], U]) -> Parser[U]:
        def parse(text: str) -> list[tuple[U, str]]:
            return [(f(value), rest) for value, rest in self._fn(text)]

        return Parser(parse, self.label)

    def or_(self, other: Parser[Any]) -> Parser[Any]:
        """Choice: all of this parser's alternatives, then all of ``other``'s."""

        def parse(text: str) -> list[tuple[Any, str]]:
            return self._fn(text) + other._fn(text)

        return Parser(parse, f"{self.label} | {other.label}")

    __or__ = or_

    def then(self, other: Parser[U]) -> Parser[U]:
        """Run ``self`` then ``other``, keeping ``other``'s value."""
        return self.bind(lambda _: other)

    __rshift__ = then

    def skip(self, other: Parser[Any]) -> Parser[T]:
        """Run ``self`` then ``other``, keeping ``self``'s value."""
        return self.bind(lambda value: other.map(lambda _: value))

    __lshift__ = skip

    def filter(self, predicate: Callable[[T], bool]) -> Parser[T]:
        def parse(text: str) -> list[tuple[T, str]]:
            return [(value, rest) for value, rest in self._fn(text) if predicate(value)]

        return Parser(parse, self.label)

    def optional(self, default: Any = None) -> Parser[Any]:
        """This parser's alternatives followed by a non-consuming ``default``."""
        return self.or_(result(default))

    def named(self, label: str) -> Parser[T]:
        return Parser(self._fn, label)


# =============================================================================
# Primitives
# =============================================================================


def result(value: T) -> Parser[T]:
    """Succeed without consuming input."""
    return Parser(lambda text: [(value, text)], "result")


def zero() -> Parser[Any]:
    """Always fail."""
    return Parser(lambda text: [], "zero")


def item() -> Parser[str]:
    """Consume exactly one character."""
    return Parser(lambda text: [(text[0], text[1:])] if text else [], "item")


def sat(predicate: Callable[[str], bool], label: str = "sat") -> Parser[str]:
    """Consume one character satisfying ``predicate``."""

    def parse(text: str) -> list[tuple[str, str]]:
        if text and predicate(text[0]):
            return [(text[0], text[1:])]
        return []

    return Parser(parse, label)


def char(c: str) -> Parser[str]:
    return sat(lambda x: x == c, repr(c))


def string(s: str) -> Parser[str]:
    """Match the literal ``s``."""

    def parse(text: str) -> list[tuple[str, str]]:
        if text.startswith(s):
            return [(s, text[len(s) :])]
        return []

    return Parser(parse, repr(s))


def seq(*parsers: Parser[Any]) -> Parser[tuple[Any, ...]]:
    """Run parsers in order, collecting their values into a tuple."""
    combined: Parser[tuple[Any, ...]] = result(())
    for p in parsers:
        combined = combined.bind(lambda acc, p=p: p.map(lambda v, acc=acc: acc + (v,)))
    return combined


def choice(*parsers: Parser[Any]) -> Parser[Any]:
    """Left-to-right choice over several parsers."""
    combined: Parser[Any] = zero()
    for p in parsers:
        combined = combined.or_(p)
    return combined


def lazy(factory: Callable[[], Parser[T]]) -> Parser[T]:
    """Defer building a parser until it is first run (for recursive grammars)."""
    cache: list[Parser[T]] = []

    def parse(text: str) -> list[tuple[T, str]]:
        if not cache:
            cache.append(factory())
        return cache[0].run(text)

    return Parser(parse, "lazy")


# =============================================================================
# Repetition
# =============================================================================


def _repeat(p: Parser[T], text: str, include_empty: bool) -> list[tuple[list[T], str]]:
    # Equivalent to the recursive definition
    #   many(p)  = many1(p) | result([])
    #   many1(p) = p >>= (x -> many(p) >>= (xs -> result([x] + xs)))
    # walked depth-first with an explicit stack, so deep inputs do not hit
    # the recursion limit. A node is emitted after all of its children,
    # which yields longest matches first and the empty match last.
    # Alternatives that consume nothing are dropped to guarantee termination.
    out: list[tuple[list[T], str]] = []
    stack: list[tuple[list[T], str, Iterator[tuple[T, str]]]] = [([], text, iter(p.run(text)))]
    while stack:
        values, rest, pending = stack[-1]
        step = next(pending, None)
        if step is None:
            stack.pop()
            if values or include_empty:
                out.append((values, rest))
            continue
        value, after = step
        if len(after) >= len(rest):
            continue
        stack.append((values + [value], after, iter(p.run(after))))
    return out


def many(p: Parser[T]) -> Parser[list[T]]:
    """Zero or more repetitions; never fails, empty match ordered last."""
    return Parser(lambda text: _repeat(p, text, True), f"many({p.label})")


def many1(p: Parser[T]) -> Parser[list[T]]:
    """One or more repetitions; fails when ``p`` never succeeds."""
    return Parser(lambda text: _repeat(p, text, False), f"many1({p.label})")


def sep_by1(p: Parser[T], sep: Parser[Any]) -> Parser[list[T]]:
    """One or more ``p`` separated by ``sep``, no trailing separator."""
    return p.bind(lambda first: many(sep.then(p)).map(lambda rest: [first] + rest))


def sep_by(p: Parser[T], sep: Parser[Any]) -> Parser[list[T]]:
    """Zero or more ``p`` separated by ``sep``."""
    return sep_by1(p, sep).or_(result([]))


def bracket(open_: Parser[Any], p: Parser[T], close: Parser[Any]) -> Parser[T]:
    """Parse ``open_ p close`` keeping only ``p``'s value."""
    return open_.then(p).skip(close)


# =============================================================================
# Character classes and lexical helpers
# =============================================================================


def digit() -> Parser[str]:
    return sat(str.isdigit, "digit")


def lower() -> Parser[str]:
    return sat(lambda c: "a" <= c <= "z", "lower")


def upper() -> Parser[str]:
    return sat(lambda c: "A" <= c <= "Z", "upper")


def letter() -> Parser[str]:
    return lower().or_(upper()).named("letter")


def alphanum() -> Parser[str]:
    return letter().or_(digit()).named("alphanum")


def word() -> Parser[str]:
    """All runs of letters, longest first, including the empty one."""
    return many(letter()).map("".join)


def munch(predicate: Callable[[str], bool], label: str = "munch") -> Parser[str]:
    """
    The longest run of characters satisfying ``predicate``, as one alternative.

    Unlike ``many(sat(predicate))`` this never offers the shorter runs, so two
    adjacent whitespace parsers cannot split the same gap in several ways.
    """

    def parse(text: str) -> list[tuple[str, str]]:
        end = 0
        while end < len(text) and predicate(text[end]):
            end += 1
        return [(text[:end], text[end:])]

    return Parser(parse, label)


def spaces() -> Parser[str]:
    """Zero or more whitespace characters (including newlines)."""
    return munch(str.isspace, "spaces")


def spaces1() -> Parser[str]:
    return spaces().filter(bool)


def blanks() -> Parser[str]:
    """Zero or more spaces or tabs, never a newline."""
    return munch(lambda c: c in " \t\r", "blanks")


def nl() -> Parser[str]:
    """Optional blanks followed by a single newline."""
    return blanks().then(char("\n"))


def el() -> Parser[str]:
    """One or more newlines."""
    return many1(char("\n")).map("".join)


def nat() -> Parser[int]:
    return many1(digit()).map(lambda ds: int("".join(ds)))


def integer() -> Parser[int]:
    """An optionally negative natural number."""
    return char("-").then(nat()).map(lambda n: -n).or_(nat())


# =============================================================================
# Running to completion
# =============================================================================


@dataclass(frozen=True)
class ParseOutcome(Generic[T]):
    """
    Outcome of running a parser over a whole input.

    Attributes:
        value: Value of the canonical parse, or of the furthest partial parse
        remainder: Unconsumed input ("" on success)
        consumed: Number of characters consumed
    """

    value: T | None
    remainder: str
    consumed: int

    @property
    def ok(self) -> bool:
        return self.remainder == ""


def complete(p: Parser[T], text: str) -> ParseOutcome[T]:
    """
    Pick the canonical parse of ``text``.

    The canonical parse is the first alternative with an empty remainder.
    When there is none, the outcome describes the alternative that consumed
    the most input (the earliest one on ties) so callers can report where
    parsing stopped.
    """
    alternatives = p.run(text)
    for value, rest in alternatives:
        if rest == "":
            return ParseOutcome(value, "", len(text))

    if not alternatives:
        return ParseOutcome(None, text, 0)

    value, rest = min(alternatives, key=lambda alt: len(alt[1]))
    return ParseOutcome(value, rest, len(text) - len(rest))
