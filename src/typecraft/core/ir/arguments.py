"""
Argument and import types for typecraft IR.

Arguments are the fields of records and of message constructors:

    data Person = { string $name, ?int $age = 0, Tag[] $tags = [] };
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ScalarKind(str, Enum):
    """Primitive kinds a field or scalar wrapper may carry."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


SCALAR_KEYWORDS = frozenset(kind.value for kind in ScalarKind)


def is_scalar(type_ref: str | None) -> bool:
    """Check whether a type reference names a scalar keyword."""
    return type_ref in SCALAR_KEYWORDS


class Import(BaseModel):
    """
    A ``use`` line of a namespace.

    Attributes:
        path: Dotted path of the imported type
        alias: Optional ``as`` alias
    """

    path: str
    alias: str | None = None

    model_config = ConfigDict(frozen=True)


class Argument(BaseModel):
    """
    A single field declaration.

    Attributes:
        name: Field identifier (without the ``$`` sigil)
        type: Scalar keyword or type name; None for untyped fields
        nullable: Declared with a leading ``?``
        is_list: Declared with a trailing ``[]``
        default: Raw default literal as written, e.g. ``'abc'``, ``-3``, ``[]``
    """

    name: str
    type: str | None = None
    nullable: bool = False
    is_list: bool = False
    default: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_scalar(self) -> bool:
        return is_scalar(self.type)

    @property
    def scalar_kind(self) -> ScalarKind | None:
        return ScalarKind(self.type) if self.is_scalar else None

    def renamed(self, name: str) -> Argument:
        return self.model_copy(update={"name": name})


def rename_reserved_arguments(reserved: list[str], arguments: list[Argument]) -> list[Argument]:
    """
    Rename arguments that collide with reserved names or with each other.

    A colliding name gets the next free numeric suffix, starting at 2:
    with ``command_type`` reserved, ``command_type`` becomes ``command_type2``
    and a second one ``command_type3``.
    """
    counts: dict[str, int] = {name: 1 for name in reserved}
    taken = set(reserved)
    renamed: list[Argument] = []

    for argument in arguments:
        name = argument.name
        if name not in taken:
            counts.setdefault(name, 1)
            taken.add(name)
            renamed.append(argument)
            continue

        candidate = name
        while candidate in taken:
            counts[name] = counts.get(name, 1) + 1
            candidate = f"{name}{counts[name]}"

        taken.add(candidate)
        renamed.append(argument.renamed(candidate))

    return renamed
