"""
Namespace and import parsers for typecraft DSL.

Two surface forms share the same import and declaration grammar.

Implicit form, ended by the next ``namespace`` keyword or end of input:

    namespace Shop.Orders
    use Shop.Customers.CustomerId
    use uuid.UUID as Uuid
    data Order = { Uuid $id, CustomerId $customer };

Brace form, any number per file:

    namespace Shop.Orders {
        enum Status = Open | Closed
    }
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, char, many, many1, seq, spaces, spaces1, string
from .base import dotted_path, identifier, keyword, line_end


def import_line() -> Parser[ir.Import]:
    """``use <dotted-path> [as <alias>]`` ended by a newline."""
    alias = spaces1().then(string("as")).then(spaces1()).then(identifier()).optional(None)
    return seq(keyword("use"), spaces1(), dotted_path(), alias, line_end()).map(
        lambda parts: ir.Import(path=parts[2], alias=parts[3])
    )


def imports() -> Parser[list[ir.Import]]:
    return many(import_line())


def _namespace_header() -> Parser[str]:
    return keyword("namespace").then(spaces1()).then(dotted_path())


def implicit_namespace(definition: Parser[ir.Definition]) -> Parser[ir.Namespace]:
    """``namespace Name`` on its own line followed by flat declarations."""
    return seq(_namespace_header(), line_end(), imports(), many(definition)).map(
        lambda parts: ir.Namespace(name=parts[0], imports=parts[2], definitions=parts[3])
    )


def braced_namespace(definition: Parser[ir.Definition]) -> Parser[ir.Namespace]:
    """``namespace Name { ... }``."""
    return seq(
        _namespace_header(),
        spaces(),
        char("{"),
        imports(),
        many(definition),
        spaces(),
        char("}"),
    ).map(lambda parts: ir.Namespace(name=parts[0], imports=parts[3], definitions=parts[4]))


def namespaces(definition: Parser[ir.Definition]) -> Parser[list[ir.Namespace]]:
    """One or more namespaces in either form, with trailing whitespace."""
    either = braced_namespace(definition).or_(implicit_namespace(definition))
    return many1(either).skip(spaces())
