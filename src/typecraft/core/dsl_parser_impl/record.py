"""
Record parser for typecraft DSL.

DSL Syntax:

    data Person : Named = {
        string $name,
        ?Email $email,
        int $age = 0,
        Tag[] $tags = []
    };
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, seq
from .base import arguments_between, assignment, construct_header, optional_markers, terminator


def record_definition() -> Parser[ir.Record]:
    """
    Parse a record declaration.

    Grammar:
        data TypeName (: Markers)? = { Argument (, Argument)* } ;
    """
    return seq(
        construct_header("data"),
        optional_markers(),
        assignment(),
        arguments_between("{", "}"),
        terminator(),
    ).map(lambda parts: ir.Record(classname=parts[0], markers=parts[1], arguments=parts[3]))
