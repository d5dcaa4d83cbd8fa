"""
Builder for commands and events.

A message becomes an abstract base class holding the id field(s), the
opaque payload and the metadata, plus one final subclass per constructor.
Subclasses validate the payload shape on construction and decode each
argument lazily on first access. ``occur`` is the entry point for new
messages and encodes its arguments into the payload up front.

In the degenerate case of a single constructor named like the message
itself, base and subclass are merged into one final class.
"""

from __future__ import annotations

from ...core import ir
from ...core.linker_impl import Registry, RegistryEntry
from ..capabilities import Capability, capability_for, error_message
from ..declarations import (
    Assignment,
    CallArgument,
    ClassDeclaration,
    ClassKind,
    ClassRef,
    ConstructFrom,
    Encode,
    EncodeToContainer,
    FieldDescriptor,
    FieldRef,
    IfPresent,
    Initialize,
    KeyGet,
    KeyRef,
    LiteralValue,
    MappingEntry,
    MappingExpr,
    MethodBinding,
    MethodDescriptor,
    Parameter,
    ParamRef,
    PresenceGuardedDecode,
    RawKind,
    ReturnField,
    ReturnValue,
    SelfRef,
    SwitchCase,
    SwitchOnDiscriminant,
    TypeRef,
    ValueCheck,
)
from .common import (
    argument_checks,
    decode_argument,
    direct_markers,
    encode_argument,
    equality_methods,
    hashed_field,
    key,
    parameter_value,
    parameters,
    type_ref,
)

PAYLOAD = "payload"
METADATA = "metadata"
CACHE = "decoded"

DICT_TYPE = TypeRef(name="dict")


class _MessageParts:
    """Pieces shared by the base class and its subclasses."""

    def __init__(self, entry: RegistryEntry, message: ir.Message, registry: Registry):
        self.entry = entry
        self.message = message
        self.registry = registry
        self.id_capabilities: list[tuple[ir.IdField, Capability]] = [
            (f, capability_for(f.type, registry, message.classname, f.name))
            for f in message.id_fields
        ]

    @property
    def discriminant_key(self) -> str:
        return self.message.discriminant_key

    def fqcn(self, classname: str) -> str:
        return f"{self.entry.namespace}.{classname}"

    # Fields and parameters

    def fields(self) -> list[FieldDescriptor]:
        return [
            *(FieldDescriptor(name=f.name, type=TypeRef(name=f.type)) for f in self.message.id_fields),
            FieldDescriptor(name=PAYLOAD, type=DICT_TYPE),
            FieldDescriptor(name=METADATA, type=DICT_TYPE),
            FieldDescriptor(name=CACHE, type=DICT_TYPE),
        ]

    def id_params(self) -> list[Parameter]:
        return [Parameter(name=f.name, type=TypeRef(name=f.type)) for f in self.message.id_fields]

    def init_params(self) -> list[Parameter]:
        return [
            *self.id_params(),
            Parameter(name=PAYLOAD, type=DICT_TYPE),
            self.metadata_param(),
        ]

    @staticmethod
    def metadata_param(keyword_only: bool = False) -> Parameter:
        return Parameter(
            name=METADATA,
            type=TypeRef(name="dict", nullable=True),
            default=LiteralValue(value=None),
            keyword_only=keyword_only,
        )

    def init_arguments(self) -> list[CallArgument]:
        return [
            *(CallArgument(value=ParamRef(name=f.name)) for f in self.message.id_fields),
            CallArgument(value=ParamRef(name=PAYLOAD)),
            CallArgument(value=ParamRef(name=METADATA)),
        ]

    def base_assignments(self) -> list[Assignment]:
        metadata = ParamRef(name=METADATA)
        return [
            *(Assignment(field=f.name, value=ParamRef(name=f.name)) for f in self.message.id_fields),
            Assignment(field=PAYLOAD, value=ParamRef(name=PAYLOAD)),
            Assignment(
                field=METADATA,
                value=IfPresent(value=metadata, then=metadata, otherwise=LiteralValue(value={})),
            ),
            Assignment(field=CACHE, value=LiteralValue(value={})),
        ]

    def payload_checks(self, constructor: ir.Constructor) -> list[ValueCheck]:
        payload = ParamRef(name=PAYLOAD)
        owner = constructor.classname
        return [
            ValueCheck(subject=payload, raw=RawKind.DICT, message=error_message(PAYLOAD, "dict")),
            *argument_checks(constructor.arguments, payload, self.registry, owner),
        ]

    # Methods

    def accessors(self) -> list[MethodDescriptor]:
        return [
            *(
                MethodDescriptor(
                    name=f.name, return_type=TypeRef(name=f.type), body=ReturnField(field=f.name)
                )
                for f in self.message.id_fields
            ),
            MethodDescriptor(name=PAYLOAD, return_type=DICT_TYPE, body=ReturnField(field=PAYLOAD)),
            MethodDescriptor(name=METADATA, return_type=DICT_TYPE, body=ReturnField(field=METADATA)),
        ]

    def abstract_discriminant(self) -> MethodDescriptor:
        return MethodDescriptor(
            name=self.discriminant_key, return_type=TypeRef(name="str"), abstract=True
        )

    def discriminant_method(self, constructor: ir.Constructor) -> MethodDescriptor:
        return MethodDescriptor(
            name=self.discriminant_key,
            return_type=TypeRef(name="str"),
            body=ReturnValue(value=LiteralValue(value=constructor.discriminant)),
        )

    def from_dict(self) -> MethodDescriptor:
        data = ParamRef(name="data")
        checks = [
            *(
                capability.check(KeyGet(source=data, key=key(f.name)), f.name)
                for f, capability in self.id_capabilities
            ),
            ValueCheck(
                subject=KeyGet(source=data, key=key(PAYLOAD)),
                raw=RawKind.DICT,
                message=error_message(PAYLOAD, "dict"),
            ),
            ValueCheck(
                subject=KeyGet(source=data, key=key(METADATA)),
                raw=RawKind.DICT,
                nullable=True,
                message=error_message(METADATA, "dict"),
            ),
        ]
        arguments = [
            *(
                CallArgument(value=capability.decode(KeyRef(source=data, key=key(f.name))))
                for f, capability in self.id_capabilities
            ),
            CallArgument(value=KeyRef(source=data, key=key(PAYLOAD))),
            CallArgument(value=KeyGet(source=data, key=key(METADATA))),
        ]
        return MethodDescriptor(
            name="from_dict",
            params=[Parameter(name="data", type=DICT_TYPE)],
            return_type=TypeRef(name=self.entry.fqcn),
            body=SwitchOnDiscriminant(
                checks=checks,
                subject=KeyGet(source=data, key=key(self.discriminant_key)),
                variable=self.discriminant_key,
                cases=[
                    SwitchCase(value=c.discriminant or "", target=self.fqcn(c.classname))
                    for c in self.message.constructors
                ],
                arguments=arguments,
                error=f'Unknown {self.message.kind.value} type "%s" given',
            ),
            binding=MethodBinding.CLASS,
        )

    def to_dict(self) -> MethodDescriptor:
        return MethodDescriptor(
            name="to_dict",
            return_type=DICT_TYPE,
            body=EncodeToContainer(
                entries=[
                    MappingEntry(
                        key=self.discriminant_key,
                        value=Encode(value=SelfRef(), method=self.discriminant_key),
                    ),
                    *(
                        MappingEntry(key=f.name, value=capability.encode(FieldRef(name=f.name)))
                        for f, capability in self.id_capabilities
                    ),
                    MappingEntry(key=PAYLOAD, value=FieldRef(name=PAYLOAD)),
                    MappingEntry(key=METADATA, value=FieldRef(name=METADATA)),
                ]
            ),
        )

    def equality(self) -> list[MethodDescriptor]:
        names = [f.name for f in self.message.id_fields]
        return equality_methods(names, [hashed_field(name) for name in names])

    def occur(self, constructor: ir.Constructor) -> MethodDescriptor:
        owner = constructor.classname
        argument_params = parameters(constructor.arguments, owner)
        keyword_only = any(p.keyword_only or p.default is not None for p in argument_params)
        payload = MappingExpr(
            entries=[
                MappingEntry(
                    key=a.name,
                    value=encode_argument(a, parameter_value(a, owner), self.registry, owner),
                )
                for a in constructor.arguments
            ]
        )
        return MethodDescriptor(
            name="occur",
            params=[*self.id_params(), *argument_params, self.metadata_param(keyword_only)],
            return_type=TypeRef(name=self.fqcn(constructor.classname)),
            body=ConstructFrom(
                target=ClassRef(fqcn=self.fqcn(constructor.classname)),
                arguments=[
                    *(CallArgument(value=ParamRef(name=f.name)) for f in self.message.id_fields),
                    CallArgument(value=payload),
                    CallArgument(value=ParamRef(name=METADATA)),
                ],
            ),
            binding=MethodBinding.CLASS,
        )

    def lazy_accessors(self, constructor: ir.Constructor) -> list[MethodDescriptor]:
        payload = FieldRef(name=PAYLOAD)
        return [
            MethodDescriptor(
                name=a.name,
                return_type=type_ref(a),
                body=PresenceGuardedDecode(
                    cache=CACHE,
                    key=a.name,
                    value=decode_argument(a, payload, self.registry, constructor.classname),
                ),
            )
            for a in constructor.arguments
        ]


def _base_class(parts: _MessageParts) -> ClassDeclaration:
    message = parts.message
    return ClassDeclaration(
        namespace=parts.entry.namespace,
        classname=message.classname,
        kind=ClassKind.ABSTRACT,
        implements=direct_markers(message.markers, parts.registry),
        fields=parts.fields(),
        methods=[
            MethodDescriptor(
                name="__init__",
                params=parts.init_params(),
                body=Initialize(assignments=parts.base_assignments()),
            ),
            parts.abstract_discriminant(),
            *parts.accessors(),
            parts.from_dict(),
            parts.to_dict(),
            *parts.equality(),
        ],
    )


def _subclass(parts: _MessageParts, constructor: ir.Constructor) -> ClassDeclaration:
    return ClassDeclaration(
        namespace=parts.entry.namespace,
        classname=constructor.classname,
        kind=ClassKind.FINAL,
        extends=parts.entry.fqcn,
        methods=[
            MethodDescriptor(
                name="__init__",
                params=parts.init_params(),
                body=Initialize(
                    checks=parts.payload_checks(constructor),
                    super_arguments=parts.init_arguments(),
                ),
            ),
            parts.discriminant_method(constructor),
            parts.occur(constructor),
            *parts.lazy_accessors(constructor),
        ],
    )


def _merged_class(parts: _MessageParts, constructor: ir.Constructor) -> ClassDeclaration:
    message = parts.message
    return ClassDeclaration(
        namespace=parts.entry.namespace,
        classname=message.classname,
        kind=ClassKind.FINAL,
        implements=direct_markers(message.markers, parts.registry),
        fields=parts.fields(),
        methods=[
            MethodDescriptor(
                name="__init__",
                params=parts.init_params(),
                body=Initialize(
                    checks=parts.payload_checks(constructor),
                    assignments=parts.base_assignments(),
                ),
            ),
            parts.discriminant_method(constructor),
            parts.occur(constructor),
            *parts.accessors(),
            *parts.lazy_accessors(constructor),
            parts.from_dict(),
            parts.to_dict(),
            *parts.equality(),
        ],
    )


def build_message(
    entry: RegistryEntry, message: ir.Message, registry: Registry
) -> dict[str, ClassDeclaration]:
    """
    Build the declarations of a command or event.

    Returns:
        The base class first, then one subclass per constructor

    Raises:
        GenerationError: If an id type or argument type has no
            serializer/deserializer
    """
    parts = _MessageParts(entry, message, registry)
    constructors = parts.message.constructors

    if len(constructors) == 1 and constructors[0].classname == parts.message.classname:
        return {entry.fqcn: _merged_class(parts, constructors[0])}

    declarations = {entry.fqcn: _base_class(parts)}
    for constructor in constructors:
        declarations[parts.fqcn(constructor.classname)] = _subclass(parts, constructor)
    return declarations
