"""
Definition types for typecraft IR.

A Definition is one parsed type declaration. The variants form a closed
union discriminated by the ``variant`` field:

    marker Named;
    enum Color = Red | Green | Blue
    string Email;
    data Person : Named = { string $name, ?Email $email };
    command UserCommand (UserId) = RegisterUser as 'user.register' (string $name) ;
    event UserEvent (EventId, UserId) = UserRegistered (string $name) ;
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .arguments import Argument, ScalarKind


class MessageKind(str, Enum):
    """Command-like (one id) or event-like (self id + subject id) messages."""

    COMMAND = "command"
    EVENT = "event"

    @property
    def discriminant_key(self) -> str:
        return f"{self.value}_type"

    @property
    def id_field_names(self) -> tuple[str, ...]:
        if self is MessageKind.COMMAND:
            return ("command_id",)
        return ("event_id", "aggregate_id")

    @property
    def reserved_names(self) -> list[str]:
        """Names message constructor arguments must not take."""
        return [
            self.discriminant_key,
            *self.id_field_names,
            "payload",
            "metadata",
            "occur",
            "from_dict",
            "to_dict",
        ]


class Marker(BaseModel):
    """A zero-field capability tag, optionally extending other markers."""

    variant: Literal["marker"] = "marker"
    classname: str
    parents: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class EnumDef(BaseModel):
    """A closed, ordered set of nullary enumerators."""

    variant: Literal["enum"] = "enum"
    classname: str
    constructors: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ScalarWrapper(BaseModel):
    """A single validated primitive value."""

    variant: Literal["scalar"] = "scalar"
    classname: str
    kind: ScalarKind
    markers: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Record(BaseModel):
    """A plain immutable value type."""

    variant: Literal["record"] = "record"
    classname: str
    markers: list[str] = Field(default_factory=list)
    arguments: list[Argument] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class IdField(BaseModel):
    """An id field of a message: its name and (unresolved or resolved) type."""

    name: str
    type: str

    model_config = ConfigDict(frozen=True)


class Constructor(BaseModel):
    """
    One concrete subtype of a message.

    Attributes:
        classname: Subtype class name
        discriminant: Explicit ``as`` tag; None until defaulted by the linker
        arguments: Payload fields, already renamed away from reserved names
    """

    classname: str
    discriminant: str | None = None
    arguments: list[Argument] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class Message(BaseModel):
    """A discriminated union used for commands and events."""

    variant: Literal["message"] = "message"
    kind: MessageKind
    classname: str
    markers: list[str] = Field(default_factory=list)
    id_fields: list[IdField] = Field(default_factory=list)
    constructors: list[Constructor] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def discriminant_key(self) -> str:
        return self.kind.discriminant_key


Definition = Annotated[
    Marker | EnumDef | ScalarWrapper | Record | Message,
    Field(discriminator="variant"),
]
