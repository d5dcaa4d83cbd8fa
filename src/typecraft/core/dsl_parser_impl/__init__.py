"""
typecraft DSL Parser Package.

The grammar is split by construct, one module each, all built from the
combinators in ``typecraft.core.combinators``:

- base: whitespace, names, literals, markers and argument lists
- marker / enum / scalar / record / message: declaration parsers
- namespace: imports and both namespace forms

Usage:
    from typecraft.core.dsl_parser_impl import parse_dsl

    module = parse_dsl(text, Path("shop.tc"))
"""

from __future__ import annotations

import logging
from pathlib import Path

from .. import ir
from ..combinators import Parser, choice, complete
from ..errors import make_parse_error
from .enum import enum_constructors, enum_definition
from .marker import marker_definition
from .message import command_definition, event_definition, message_constructor
from .namespace import braced_namespace, implicit_namespace, import_line, namespaces
from .record import record_definition
from .scalar import scalar_definition, scalar_wrapper

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 100


def definition() -> Parser[ir.Definition]:
    """Any single declaration."""
    return choice(
        marker_definition(),
        enum_definition(),
        scalar_definition(),
        record_definition(),
        command_definition(),
        event_definition(),
    ).named("definition")


def file_parser() -> Parser[list[ir.Namespace]]:
    return namespaces(definition())


def _location(text: str, offset: int) -> tuple[int, int]:
    line = text.count("\n", 0, offset) + 1
    column = offset - (text.rfind("\n", 0, offset) + 1) + 1
    return line, column


def parse_dsl(text: str, file: Path) -> ir.ModuleIR:
    """
    Parse one DSL file.

    Args:
        text: File contents
        file: Source path, used for error reporting

    Returns:
        ModuleIR holding every namespace of the file

    Raises:
        ParseError: If no alternative consumes the entire input
    """
    outcome = complete(file_parser(), text)

    if not outcome.ok:
        rest = outcome.remainder.lstrip()
        offset = len(text) - len(rest)
        line, column = _location(text, offset)
        raise make_parse_error(
            "Syntax error: could not parse input from here",
            file,
            line,
            column,
            snippet=rest[:SNIPPET_LENGTH],
        )

    parsed = outcome.value or []
    logger.debug(
        "Parsed %s: %s",
        file,
        ", ".join(f"{ns.name} ({len(ns.definitions)} definitions)" for ns in parsed),
    )
    return ir.ModuleIR(file=file, namespaces=parsed)


__all__ = [
    "braced_namespace",
    "command_definition",
    "definition",
    "enum_constructors",
    "enum_definition",
    "event_definition",
    "file_parser",
    "implicit_namespace",
    "import_line",
    "marker_definition",
    "message_constructor",
    "parse_dsl",
    "record_definition",
    "scalar_definition",
    "scalar_wrapper",
]
