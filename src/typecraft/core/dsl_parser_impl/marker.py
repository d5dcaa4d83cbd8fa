"""
Marker parser for typecraft DSL.

DSL Syntax:

    marker Named;
    marker Auditable : Named, Timestamped;
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, seq
from .base import construct_header, optional_markers, terminator


def marker_definition() -> Parser[ir.Marker]:
    """
    Parse a marker declaration.

    Grammar:
        marker TypeName (: TypeRef (, TypeRef)*)? ;
    """
    return seq(construct_header("marker"), optional_markers(), terminator()).map(
        lambda parts: ir.Marker(classname=parts[0], parents=parts[1])
    )
