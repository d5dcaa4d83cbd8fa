"""
Enum parser for typecraft DSL.

DSL Syntax:

    enum Color = Red | Green | Blue

An enum ends at a newline rather than a semicolon; without it the last
constructor could swallow whatever follows.
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, nl, sep_by1, seq
from .base import assignment, construct_header, constructor_separator, type_name


def enum_constructors() -> Parser[list[str]]:
    """``Ctor (| Ctor)*`` terminated by a newline."""
    return sep_by1(type_name(), constructor_separator()).skip(nl())


def enum_definition() -> Parser[ir.EnumDef]:
    """
    Parse an enum declaration.

    Grammar:
        enum TypeName = TypeName (| TypeName)* NEWLINE
    """
    return seq(construct_header("enum"), assignment(), enum_constructors()).map(
        lambda parts: ir.EnumDef(classname=parts[0], constructors=parts[2])
    )
