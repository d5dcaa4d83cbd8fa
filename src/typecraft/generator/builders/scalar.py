from ...core import ir
from ...core.linker_impl import Registry, RegistryEntry
from ..capabilities import SCALAR_PYTHON_TYPES, scalar_check
from ..declarations import (
    Assignment,
    CallArgument,
    ClassDeclaration,
    ClassKind,
    ClassRef,
    ConstructFrom,
    FieldDescriptor,
    Initialize,
    MethodBinding,
    MethodDescriptor,
    Parameter,
    ParamRef,
    ReturnField,
    TypeRef,
)
from .common import direct_markers, equality_methods, hashed_field

VALUE = "value"


def build_scalar(
    entry: RegistryEntry, wrapper: ir.ScalarWrapper, registry: Registry
) -> dict[str, ClassDeclaration]:
    """A one-field immutable wrapper whose constructor validates the primitive kind."""
    value_type = TypeRef(name=SCALAR_PYTHON_TYPES[wrapper.kind])
    value = ParamRef(name=VALUE)

    declaration = ClassDeclaration(
        namespace=entry.namespace,
        classname=wrapper.classname,
        kind=ClassKind.FINAL,
        implements=direct_markers(wrapper.markers, registry),
        fields=[FieldDescriptor(name=VALUE, type=value_type)],
        methods=[
            MethodDescriptor(
                name="__init__",
                params=[Parameter(name=VALUE, type=value_type)],
                body=Initialize(
                    checks=[scalar_check(wrapper.kind, value, wrapper.classname)],
                    assignments=[Assignment(field=VALUE, value=value)],
                ),
            ),
            MethodDescriptor(
                name="from_value",
                params=[Parameter(name=VALUE, type=value_type)],
                return_type=TypeRef(name=entry.fqcn),
                body=ConstructFrom(
                    target=ClassRef(fqcn=entry.fqcn), arguments=[CallArgument(value=value)]
                ),
                binding=MethodBinding.CLASS,
            ),
            MethodDescriptor(name=VALUE, return_type=value_type, body=ReturnField(field=VALUE)),
            *equality_methods([VALUE], [hashed_field(VALUE)]),
        ],
    )
    return {entry.fqcn: declaration}
