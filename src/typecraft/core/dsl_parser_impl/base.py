"""
Shared lexical parsers for the typecraft DSL.

Every construct parser is assembled from these helpers. They all follow the
engine's conventions: every alternative is kept, longest match first, and a
construct owns the whitespace in front of it but not behind it.
"""

from __future__ import annotations

from .. import ir
from ..combinators import (
    Parser,
    alphanum,
    blanks,
    bracket,
    char,
    choice,
    digit,
    letter,
    many,
    many1,
    sat,
    sep_by,
    sep_by1,
    seq,
    spaces,
    spaces1,
    string,
    upper,
)

# Class names that would shadow Python constants in generated code.
RESERVED_TYPE_NAMES = frozenset({"True", "False", "None"})


def eof() -> Parser[str]:
    """Succeed only at the end of input."""
    return Parser(lambda text: [("", text)] if text == "" else [], "eof")


def line_end() -> Parser[str]:
    """A newline (after optional blanks) or the end of input."""
    return blanks().then(char("\n").or_(eof()))


def keyword(word: str) -> Parser[str]:
    """A keyword preceded by optional whitespace."""
    return spaces().then(string(word))


def ident_char() -> Parser[str]:
    return alphanum().or_(char("_"))


def type_name() -> Parser[str]:
    """A class name: an uppercase letter followed by letters, digits or ``_``."""
    return (
        upper()
        .bind(lambda first: many(ident_char()).map(lambda rest: first + "".join(rest)))
        .filter(lambda name: name not in RESERVED_TYPE_NAMES)
        .named("type name")
    )


def field_name() -> Parser[str]:
    """A field name: a letter or ``_`` followed by letters, digits or ``_``."""
    return (
        letter()
        .or_(char("_"))
        .bind(lambda first: many(ident_char()).map(lambda rest: first + "".join(rest)))
        .named("field name")
    )


def identifier() -> Parser[str]:
    """A path segment of a namespace or import."""
    return field_name().named("identifier")


def dotted_path() -> Parser[str]:
    """A dotted path like ``Shop.Orders`` or ``uuid.UUID``."""
    return sep_by1(identifier(), char(".")).map(".".join).named("dotted path")


def type_ref() -> Parser[str]:
    """A class name, optionally qualified: ``Bar`` or ``Foo.Bar``."""
    return many(identifier().skip(char("."))).bind(
        lambda prefix: type_name().map(lambda name: "".join(p + "." for p in prefix) + name)
    )


def scalar_keyword() -> Parser[str]:
    return choice(*(string(keyword) for keyword in sorted(ir.SCALAR_KEYWORDS)))


def comma() -> Parser[str]:
    return spaces().then(char(",")).skip(spaces())


def constructor_separator() -> Parser[str]:
    return spaces().then(char("|")).skip(spaces())


def assignment() -> Parser[str]:
    return spaces().then(char("=")).skip(spaces())


def terminator() -> Parser[str]:
    return spaces().then(char(";"))


def markers() -> Parser[list[str]]:
    """``: Marker (, Marker)*`` after a class name."""
    return spaces().then(char(":")).then(spaces()).then(sep_by1(type_ref(), comma()))


def optional_markers() -> Parser[list[str]]:
    return markers().optional([])


# =============================================================================
# Literals
# =============================================================================


def _digits() -> Parser[str]:
    return many1(digit()).map("".join)


def _signed(p: Parser[str]) -> Parser[str]:
    return char("-").bind(lambda sign: p.map(lambda body: sign + body)).or_(p)


def integer_literal() -> Parser[str]:
    return _signed(_digits())


def decimal_literal() -> Parser[str]:
    body = seq(_digits(), char("."), _digits()).map("".join)
    return _signed(body)


def text_literal() -> Parser[str]:
    """Single-quoted text, returned with its quotes."""
    body = many(sat(lambda c: c != "'" and c != "\n", "text")).map("".join)
    return bracket(char("'"), body, char("'")).map(lambda text: f"'{text}'")


def literal() -> Parser[str]:
    """A default value literal, returned as written."""
    return choice(
        decimal_literal(),
        integer_literal(),
        string("null"),
        string("[]"),
        string("true"),
        string("false"),
        text_literal(),
    ).named("literal")


# =============================================================================
# Arguments
# =============================================================================


def _default_value() -> Parser[str | None]:
    return assignment().then(literal()).optional(None)


def argument() -> Parser[ir.Argument]:
    """``[?]Type[[]] $name [= literal]``."""
    return seq(
        spaces(),
        char("?").optional(""),
        scalar_keyword().or_(type_ref()).optional(None),
        string("[]").optional(""),
        spaces(),
        char("$"),
        field_name(),
        _default_value(),
    ).map(
        lambda parts: ir.Argument(
            name=parts[6],
            type=parts[2],
            nullable=parts[1] == "?",
            is_list=parts[3] == "[]",
            default=parts[7],
        )
    )


def arguments_between(open_: str, close: str, allow_empty: bool = False) -> Parser[list[ir.Argument]]:
    """A comma separated argument list wrapped in ``open_`` and ``close``."""
    body = sep_by(argument(), comma()) if allow_empty else sep_by1(argument(), comma())
    return bracket(
        spaces().then(char(open_)).skip(spaces()),
        body,
        spaces().then(char(close)),
    )


def construct_header(word: str) -> Parser[str]:
    """``<keyword> <TypeName>``, returning the type name."""
    return keyword(word).then(spaces1()).then(type_name())
