"""
Helpers shared by the builders.

Records and messages turn a list of arguments into the same pieces:
annotations, default values, shape checks against a raw dict, and
decode/encode expressions. Value classes share the equality methods.
Records apply them to ``data`` in ``from_dict``; messages apply them to the
opaque payload.
"""

from __future__ import annotations

from ...core import ir
from ...core.errors import GenerationError
from ...core.linker_impl import Registry
from ..capabilities import SCALAR_PYTHON_TYPES, Capability, capability_for, list_check, scalar_check
from ..declarations import (
    Assignment,
    CallArgument,
    CompareFields,
    Encode,
    Expr,
    FieldRef,
    HashValues,
    IfPresent,
    KeyGet,
    KeyRef,
    LiteralValue,
    MapEach,
    MethodDescriptor,
    Parameter,
    ParamRef,
    TypeRef,
    ValueCheck,
)

ELEMENT_VAR = "e"


def key(name: str) -> LiteralValue:
    return LiteralValue(value=name)


def type_ref(argument: ir.Argument) -> TypeRef:
    """Annotation for a resolved argument."""
    if argument.scalar_kind is not None:
        name = SCALAR_PYTHON_TYPES[argument.scalar_kind]
    else:
        name = argument.type
    return TypeRef(name=name, is_list=argument.is_list, nullable=argument.nullable)


def referenced_capability(
    argument: ir.Argument, registry: Registry, owner: str
) -> Capability | None:
    """Capability of a non-scalar typed argument; None for scalars and untyped ones."""
    if argument.type is None or argument.is_scalar:
        return None
    return capability_for(argument.type, registry, owner, argument.name)


def _marker_ancestors(marker: str, registry: Registry) -> set[str]:
    ancestors: set[str] = set()
    pending = [marker]
    while pending:
        entry = registry.get(pending.pop())
        if entry is None or not isinstance(entry.definition, ir.Marker):
            continue
        for parent in entry.definition.parents:
            if parent not in ancestors:
                ancestors.add(parent)
                pending.append(parent)
    return ancestors


def direct_markers(markers: list[str], registry: Registry) -> list[str]:
    """
    Markers to list as bases: duplicates and markers already inherited
    through another listed marker are dropped, order is kept.

    ``: Named, Auditable`` with ``marker Auditable : Named`` gives ``[Auditable]``.
    """
    implied: set[str] = set()
    for marker in markers:
        implied |= _marker_ancestors(marker, registry)

    direct: list[str] = []
    for marker in markers:
        if marker not in implied and marker not in direct:
            direct.append(marker)
    return direct


# =============================================================================
# Defaults
# =============================================================================


def _strip_quotes(raw: str) -> str:
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    return raw


def _untyped_literal(raw: str) -> object:
    if raw == "[]":
        return []
    if raw in ("true", "false"):
        return raw == "true"
    if raw.startswith("'"):
        return _strip_quotes(raw)
    if "." in raw:
        return float(raw)
    return int(raw)


def default_value(argument: ir.Argument, owner: str) -> LiteralValue | None:
    """
    Interpret an argument's raw default literal according to its type.

    Returns None when no default was declared.

    Raises:
        GenerationError: If the literal does not fit the argument's type
    """
    raw = argument.default
    if raw is None:
        return None
    if raw == "null":
        return LiteralValue(value=None)

    if argument.is_list:
        if raw == "[]":
            return LiteralValue(value=[])
        raise GenerationError(
            f"{owner}: field '{argument.name}' is a list, only [] is allowed as its default"
        )

    try:
        match argument.scalar_kind:
            case ir.ScalarKind.INT:
                return LiteralValue(value=int(raw))
            case ir.ScalarKind.FLOAT:
                return LiteralValue(value=float(raw))
            case ir.ScalarKind.BOOL:
                return LiteralValue(value=raw == "true")
            case ir.ScalarKind.STRING:
                return LiteralValue(value=_strip_quotes(raw))
            case None if argument.type is None:
                return LiteralValue(value=_untyped_literal(raw))
    except ValueError as e:
        raise GenerationError(
            f"{owner}: invalid default {raw} for field '{argument.name}' ({e})"
        ) from e

    raise GenerationError(
        f"{owner}: field '{argument.name}' is typed as '{argument.type}', "
        f"only null is allowed as its default"
    )


def parameters(arguments: list[ir.Argument], owner: str) -> list[Parameter]:
    """
    Constructor parameters for ``arguments``.

    Once a parameter has a default, the ones after it become keyword-only.
    List defaults are passed as None and replaced by a fresh list on assignment.
    """
    params: list[Parameter] = []
    keyword_only = False
    for argument in arguments:
        annotation = type_ref(argument)
        default = default_value(argument, owner)
        keyword_only_here = keyword_only
        if default is not None:
            keyword_only = True
            if default.value == []:
                default = LiteralValue(value=None)
                annotation = annotation.model_copy(update={"nullable": True})
        params.append(
            Parameter(
                name=argument.name,
                type=annotation,
                default=default,
                keyword_only=keyword_only_here,
            )
        )
    return params


def parameter_value(argument: ir.Argument, owner: str) -> Expr:
    """The value a parameter from ``parameters`` stands for."""
    value = ParamRef(name=argument.name)
    default = default_value(argument, owner)
    if default is not None and default.value == []:
        return IfPresent(value=value, then=value, otherwise=LiteralValue(value=[]))
    return value


def assignments(arguments: list[ir.Argument], owner: str) -> list[Assignment]:
    return [Assignment(field=a.name, value=parameter_value(a, owner)) for a in arguments]


# =============================================================================
# Checks, decoding, encoding
# =============================================================================


def argument_check(
    argument: ir.Argument, source: Expr, registry: Registry, owner: str
) -> ValueCheck | None:
    """
    Shape check for one argument in the raw dict ``source``.

    Untyped arguments are not checked; lists are only checked for being lists.
    """
    subject = KeyGet(source=source, key=key(argument.name))

    if argument.is_list:
        return list_check(subject, argument.name, argument.nullable)
    if argument.scalar_kind is not None:
        return scalar_check(argument.scalar_kind, subject, argument.name, argument.nullable)

    capability = referenced_capability(argument, registry, owner)
    if capability is None:
        return None
    return capability.check(subject, argument.name, argument.nullable)


def argument_checks(
    arguments: list[ir.Argument], source: Expr, registry: Registry, owner: str
) -> list[ValueCheck]:
    checks = (argument_check(a, source, registry, owner) for a in arguments)
    return [c for c in checks if c is not None]


def decode_argument(argument: ir.Argument, source: Expr, registry: Registry, owner: str) -> Expr:
    """Expression building an argument's value out of the raw dict ``source``."""
    lookup = key(argument.name)
    present = KeyGet(source=source, key=lookup)
    if argument.nullable or argument.type is None:
        raw: Expr = present
    else:
        raw = KeyRef(source=source, key=lookup)

    capability = referenced_capability(argument, registry, owner)
    if capability is None:
        return raw

    if argument.is_list:
        decoded: Expr = MapEach(
            source=raw,
            var=ELEMENT_VAR,
            element=capability.decode(ParamRef(name=ELEMENT_VAR)),
        )
    else:
        decoded = capability.decode(raw)

    if argument.nullable:
        return IfPresent(value=present, then=decoded)
    return decoded


def encode_argument(argument: ir.Argument, value: Expr, registry: Registry, owner: str) -> Expr:
    """Expression turning an argument's value into its raw form."""
    capability = referenced_capability(argument, registry, owner)
    if capability is None:
        return value

    if argument.is_list:
        encoded: Expr = MapEach(
            source=value,
            var=ELEMENT_VAR,
            element=capability.encode(ParamRef(name=ELEMENT_VAR)),
        )
    else:
        encoded = capability.encode(value)

    if argument.nullable:
        return IfPresent(value=value, then=encoded)
    return encoded


def keyword_arguments(arguments: list[ir.Argument], values: list[Expr]) -> list[CallArgument]:
    return [CallArgument(name=a.name, value=v) for a, v in zip(arguments, values)]


def hashed_field(name: str, is_list: bool = False, nullable: bool = False) -> Expr:
    """A field as it enters ``__hash__``: lists are hashed as tuples."""
    value = FieldRef(name=name)
    if not is_list:
        return value
    as_tuple = Encode(value=value, function="tuple")
    if nullable:
        return IfPresent(value=value, then=as_tuple)
    return as_tuple


def equality_methods(fields: list[str], hashed: list[Expr]) -> list[MethodDescriptor]:
    """``__eq__`` over ``fields`` and the ``__hash__`` consistent with it."""
    return [
        MethodDescriptor(
            name="__eq__",
            params=[Parameter(name="other", type=TypeRef(name="object"))],
            return_type=TypeRef(name="bool"),
            body=CompareFields(fields=fields),
        ),
        MethodDescriptor(
            name="__hash__",
            return_type=TypeRef(name="int"),
            body=HashValues(values=hashed),
        ),
    ]
