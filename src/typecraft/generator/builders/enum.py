from ...core import ir
from ...core.linker_impl import Registry, RegistryEntry
from ..capabilities import error_message
from ..declarations import (
    AttributeRef,
    ClassDeclaration,
    ClassKind,
    ClassRef,
    Constant,
    KeyRef,
    LiteralValue,
    MethodBinding,
    MethodDescriptor,
    Parameter,
    ParamRef,
    RawKind,
    ReturnValue,
    SelfRef,
    TypeRef,
    ValueCheck,
)


def build_enum(
    entry: RegistryEntry, enum: ir.EnumDef, registry: Registry
) -> dict[str, ClassDeclaration]:
    """
    Build an enumeration: one singleton member per constructor, in declared
    order, with its ordinal as value.
    """
    name = ParamRef(name="name")
    declaration = ClassDeclaration(
        namespace=entry.namespace,
        classname=enum.classname,
        kind=ClassKind.ENUM,
        constants=[
            Constant(name=member, value=LiteralValue(value=ordinal))
            for ordinal, member in enumerate(enum.constructors)
        ],
        methods=[
            MethodDescriptor(
                name="from_name",
                params=[Parameter(name="name", type=TypeRef(name="str"))],
                return_type=TypeRef(name=entry.fqcn),
                body=ReturnValue(
                    checks=[
                        ValueCheck(
                            subject=name,
                            raw=RawKind.STR,
                            member_of=entry.fqcn,
                            message=error_message(enum.classname, f"{enum.classname} name"),
                        )
                    ],
                    value=KeyRef(source=ClassRef(fqcn=entry.fqcn), key=name),
                ),
                binding=MethodBinding.CLASS,
            ),
            MethodDescriptor(
                name="to_name",
                return_type=TypeRef(name="str"),
                body=ReturnValue(value=AttributeRef(source=SelfRef(), name="name")),
            ),
            MethodDescriptor(
                name="ordinal",
                return_type=TypeRef(name="int"),
                body=ReturnValue(value=AttributeRef(source=SelfRef(), name="value")),
            ),
        ],
    )
    return {entry.fqcn: declaration}
