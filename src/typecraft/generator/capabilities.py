"""
Generated capabilities.

A capability is what a type's generated code offers to other types that
embed it as a field: the raw shape it is stored as, how that shape is
validated, and how values are decoded and encoded. The generator asks for
the capability of a resolved reference instead of inspecting definitions.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from ..core import ir
from ..core.builtins import is_builtin
from ..core.errors import GenerationError
from ..core.linker_impl import Registry
from .declarations import Decode, Encode, Expr, RawKind, ValueCheck

SCALAR_RAW_KINDS = {
    ir.ScalarKind.STRING: RawKind.STR,
    ir.ScalarKind.INT: RawKind.INT,
    ir.ScalarKind.FLOAT: RawKind.FLOAT,
    ir.ScalarKind.BOOL: RawKind.BOOL,
}

SCALAR_PYTHON_TYPES = {
    ir.ScalarKind.STRING: "str",
    ir.ScalarKind.INT: "int",
    ir.ScalarKind.FLOAT: "float",
    ir.ScalarKind.BOOL: "bool",
}

RAW_LABELS = {
    RawKind.DICT: "dict",
    RawKind.STR: "string",
    RawKind.INT: "int",
    RawKind.FLOAT: "float",
    RawKind.BOOL: "bool",
    RawKind.LIST: "list",
}


class Capability(BaseModel):
    """
    Attributes:
        target: Fully-qualified class the values belong to
        raw: Raw shape of a serialized value
        label: What the validation error says is expected
        member_of: Enum whose member names a raw value must be one of
        decode_method: Class-level decoder, or None to call the class itself
        encode_method: Instance-level encoder
        encode_function: Builtin function used to encode instead of a method
    """

    target: str
    raw: RawKind
    label: str
    member_of: str | None = None
    decode_method: str | None = None
    encode_method: str | None = None
    encode_function: str | None = None

    model_config = ConfigDict(frozen=True)

    def decode(self, value: Expr) -> Decode:
        return Decode(target=self.target, method=self.decode_method, value=value)

    def encode(self, value: Expr) -> Encode:
        return Encode(value=value, method=self.encode_method, function=self.encode_function)

    def check(self, subject: Expr, field: str, nullable: bool = False) -> ValueCheck:
        return ValueCheck(
            subject=subject,
            raw=self.raw,
            nullable=nullable,
            member_of=self.member_of,
            message=error_message(field, self.label),
        )


BUILTIN_CAPABILITIES = {
    "uuid.UUID": Capability(
        target="uuid.UUID", raw=RawKind.STR, label="string", encode_function="str"
    ),
    "datetime.datetime": Capability(
        target="datetime.datetime",
        raw=RawKind.STR,
        label="string",
        decode_method="fromisoformat",
        encode_method="isoformat",
    ),
    "datetime.date": Capability(
        target="datetime.date",
        raw=RawKind.STR,
        label="string",
        decode_method="fromisoformat",
        encode_method="isoformat",
    ),
    "decimal.Decimal": Capability(
        target="decimal.Decimal", raw=RawKind.STR, label="string", encode_function="str"
    ),
}


def error_message(field: str, label: str) -> str:
    return f'Error on "{field}", {label} expected'


def scalar_check(kind: ir.ScalarKind, subject: Expr, field: str, nullable: bool = False) -> ValueCheck:
    raw = SCALAR_RAW_KINDS[kind]
    return ValueCheck(
        subject=subject,
        raw=raw,
        nullable=nullable,
        message=error_message(field, RAW_LABELS[raw]),
    )


def list_check(subject: Expr, field: str, nullable: bool = False) -> ValueCheck:
    return ValueCheck(
        subject=subject,
        raw=RawKind.LIST,
        nullable=nullable,
        message=error_message(field, RAW_LABELS[RawKind.LIST]),
    )


def capability_of(definition: ir.Definition, fqcn: str) -> Capability | None:
    """The capability a definition's generated class exposes, if any."""
    match definition:
        case ir.Record() | ir.Message():
            return Capability(
                target=fqcn,
                raw=RawKind.DICT,
                label="dict",
                decode_method="from_dict",
                encode_method="to_dict",
            )
        case ir.EnumDef():
            return Capability(
                target=fqcn,
                raw=RawKind.STR,
                label=f"{definition.classname} name",
                member_of=fqcn,
                decode_method="from_name",
                encode_method="to_name",
            )
        case ir.ScalarWrapper():
            raw = SCALAR_RAW_KINDS[definition.kind]
            return Capability(
                target=fqcn,
                raw=raw,
                label=RAW_LABELS[raw],
                decode_method="from_value",
                encode_method="value",
            )
        case ir.Marker():
            return None


def capability_for(type_ref: str, registry: Registry, owner: str, field: str) -> Capability:
    """
    Look up the capability of a resolved, non-scalar type reference.

    Args:
        type_ref: Fully-qualified type name
        registry: Resolved definitions
        owner: Classname of the type being generated, for error messages
        field: Field being generated, for error messages

    Raises:
        GenerationError: If the type exposes no serializer/deserializer
    """
    if is_builtin(type_ref):
        return BUILTIN_CAPABILITIES[type_ref]

    entry = registry.get(type_ref)
    if entry is None:
        raise GenerationError(f"{owner}: field '{field}' references unknown type '{type_ref}'")

    capability = capability_of(entry.definition, type_ref)
    if capability is None:
        raise GenerationError(
            f"{owner}: field '{field}' is typed as '{type_ref}', "
            f"which has no generated serializer or deserializer"
        )
    return capability
