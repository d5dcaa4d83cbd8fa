from ...core import ir
from ...core.errors import GenerationError
from ...core.linker_impl import Registry, RegistryEntry
from ..declarations import (
    ClassDeclaration,
    ClassKind,
    ClassRef,
    ConstructFrom,
    EncodeToContainer,
    FieldDescriptor,
    FieldRef,
    Initialize,
    MappingEntry,
    MethodBinding,
    MethodDescriptor,
    Parameter,
    ParamRef,
    ReturnField,
    TypeRef,
)
from .common import (
    argument_checks,
    assignments,
    decode_argument,
    direct_markers,
    encode_argument,
    equality_methods,
    hashed_field,
    keyword_arguments,
    parameters,
    type_ref,
)

GENERATED_METHODS = frozenset({"from_dict", "to_dict"})


def build_record(
    entry: RegistryEntry, record: ir.Record, registry: Registry
) -> dict[str, ClassDeclaration]:
    """
    Build a final value class for a record.

    Generates per argument a field, a constructor parameter and an accessor,
    plus ``from_dict`` (shape checks, then decoding), ``to_dict`` (its
    mirror) and structural equality.

    Raises:
        GenerationError: If an argument is declared twice, shadows a generated
            method, or has a type without serializer/deserializer
    """
    owner = record.classname
    arguments = record.arguments

    seen: set[str] = set()
    for argument in arguments:
        if argument.name in GENERATED_METHODS:
            raise GenerationError(
                f"{owner}: field '{argument.name}' clashes with the generated method of that name"
            )
        if argument.name in seen:
            raise GenerationError(f"{owner}: duplicate field '{argument.name}'")
        seen.add(argument.name)

    data = ParamRef(name="data")

    methods = [
        MethodDescriptor(
            name="__init__",
            params=parameters(arguments, owner),
            body=Initialize(assignments=assignments(arguments, owner)),
        ),
        *(
            MethodDescriptor(name=a.name, return_type=type_ref(a), body=ReturnField(field=a.name))
            for a in arguments
        ),
        MethodDescriptor(
            name="from_dict",
            params=[Parameter(name="data", type=TypeRef(name="dict"))],
            return_type=TypeRef(name=entry.fqcn),
            body=ConstructFrom(
                checks=argument_checks(arguments, data, registry, owner),
                target=ClassRef(fqcn=entry.fqcn),
                arguments=keyword_arguments(
                    arguments, [decode_argument(a, data, registry, owner) for a in arguments]
                ),
            ),
            binding=MethodBinding.CLASS,
        ),
        MethodDescriptor(
            name="to_dict",
            return_type=TypeRef(name="dict"),
            body=EncodeToContainer(
                entries=[
                    MappingEntry(
                        key=a.name,
                        value=encode_argument(a, FieldRef(name=a.name), registry, owner),
                    )
                    for a in arguments
                ]
            ),
        ),
        *equality_methods(
            [a.name for a in arguments],
            [hashed_field(a.name, a.is_list, a.nullable) for a in arguments],
        ),
    ]

    declaration = ClassDeclaration(
        namespace=entry.namespace,
        classname=record.classname,
        kind=ClassKind.FINAL,
        implements=direct_markers(record.markers, registry),
        fields=[FieldDescriptor(name=a.name, type=type_ref(a)) for a in arguments],
        methods=methods,
    )
    return {entry.fqcn: declaration}
