"""
Scalar wrapper parsers for typecraft DSL.

One construct per primitive kind:

    string Email;
    int Quantity;
    float Price : Monetary;
    bool Flag;
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, choice, seq
from .base import construct_header, optional_markers, terminator


def scalar_wrapper(kind: ir.ScalarKind) -> Parser[ir.ScalarWrapper]:
    """Parse ``<kind> TypeName (: Markers)? ;`` for one primitive kind."""
    return seq(construct_header(kind.value), optional_markers(), terminator()).map(
        lambda parts: ir.ScalarWrapper(classname=parts[0], kind=kind, markers=parts[1])
    )


def scalar_definition() -> Parser[ir.ScalarWrapper]:
    return choice(*(scalar_wrapper(kind) for kind in ir.ScalarKind))
