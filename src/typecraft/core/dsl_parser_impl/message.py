"""
Message (command/event) parsers for typecraft DSL.

DSL Syntax:

    command UserCommand : Auditable (UserId) =
        RegisterUser as 'user.register' (string $name, ?Email $email)
        | DeactivateUser ;

    event UserEvent (EventId, UserId) =
        UserRegistered (string $name)
        | UserDeactivated as user.deactivated ;

A constructor without ``as`` gets ``<namespace>.<ClassName>`` as its
discriminant during linking.
"""

from __future__ import annotations

from .. import ir
from ..combinators import Parser, char, choice, many1, sat, sep_by1, seq, spaces, spaces1, string
from .base import (
    arguments_between,
    assignment,
    comma,
    construct_header,
    constructor_separator,
    optional_markers,
    terminator,
    type_name,
    type_ref,
)

_BARE_DISCRIMINANT_CHARS = frozenset(".:-_\\")


def _quoted(quote: str) -> Parser[str]:
    body = many1(sat(lambda c: c != quote and c != "\n", "discriminant")).map("".join)
    return char(quote).then(body).skip(char(quote))


def _bare_discriminant() -> Parser[str]:
    return many1(sat(lambda c: c.isalnum() or c in _BARE_DISCRIMINANT_CHARS, "discriminant")).map(
        "".join
    )


def discriminant() -> Parser[str | None]:
    """Optional ``as <discriminant>`` after a constructor name."""
    tag = choice(_quoted('"'), _quoted("'"), _bare_discriminant())
    return spaces1().then(string("as")).then(spaces1()).then(tag).optional(None)


def message_constructor(kind: ir.MessageKind) -> Parser[ir.Constructor]:
    """``ClassName [as discriminant] [(Argument, ...)]``."""
    return seq(
        type_name(),
        discriminant(),
        arguments_between("(", ")", allow_empty=True).optional([]),
    ).map(
        lambda parts: ir.Constructor(
            classname=parts[0],
            discriminant=parts[1],
            arguments=ir.rename_reserved_arguments(kind.reserved_names, parts[2]),
        )
    )


def _id_types(kind: ir.MessageKind) -> Parser[list[str]]:
    if kind is ir.MessageKind.COMMAND:
        ids = type_ref().map(lambda t: [t])
    else:
        ids = seq(type_ref(), comma(), type_ref()).map(lambda parts: [parts[0], parts[2]])
    return spaces().then(char("(")).then(spaces()).then(ids).skip(spaces()).skip(char(")"))


def message_definition(kind: ir.MessageKind) -> Parser[ir.Message]:
    """
    Parse a command or event declaration.

    Grammar:
        command TypeName (: Markers)? ( IdType ) = Ctor (| Ctor)* ;
        event TypeName (: Markers)? ( IdType , SubjectIdType ) = Ctor (| Ctor)* ;
    """
    return seq(
        construct_header(kind.value),
        optional_markers(),
        _id_types(kind),
        assignment(),
        sep_by1(message_constructor(kind), constructor_separator()),
        terminator(),
    ).map(
        lambda parts: ir.Message(
            kind=kind,
            classname=parts[0],
            markers=parts[1],
            id_fields=[
                ir.IdField(name=name, type=type_)
                for name, type_ in zip(kind.id_field_names, parts[2], strict=True)
            ],
            constructors=parts[4],
        )
    )


def command_definition() -> Parser[ir.Message]:
    return message_definition(ir.MessageKind.COMMAND)


def event_definition() -> Parser[ir.Message]:
    return message_definition(ir.MessageKind.EVENT)
