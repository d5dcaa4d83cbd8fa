"""
Emission-ready declarations.

This is the boundary between the generator and a backend. A backend renders
these models to target-language text in the given order and makes no
semantic decisions of its own: every check, default, conversion and
dispatch is already spelled out here.

Three small closed vocabularies:

- ``Expr``: value expressions (field and parameter references, literals,
  dict lookups, decode/encode calls, element-wise mapping)
- ``ValueCheck``: a shape check that raises with a fixed message
- ``Body``: method body shapes (return field, construct from, presence-guarded
  decode, encode to container, switch on discriminant, ...)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# Types
# =============================================================================


class RawKind(str, Enum):
    """Shape of a serialized value, as found in a dict produced by ``to_dict``."""

    DICT = "dict"
    STR = "str"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"


class TypeRef(_Frozen):
    """
    A type annotation.

    ``name`` is either a builtin Python name (``str``, ``int``, ``dict``) or a
    fully-qualified class name; None means untyped.
    """

    name: str | None = None
    is_list: bool = False
    nullable: bool = False


# =============================================================================
# Expressions
# =============================================================================


class SelfRef(_Frozen):
    expr: Literal["self"] = "self"


class ParamRef(_Frozen):
    expr: Literal["param"] = "param"
    name: str


class FieldRef(_Frozen):
    """Instance storage of a declared field."""

    expr: Literal["field"] = "field"
    name: str


class ClassRef(_Frozen):
    expr: Literal["class"] = "class"
    fqcn: str


class AttributeRef(_Frozen):
    """``source.name``."""

    expr: Literal["attribute"] = "attribute"
    source: Expr
    name: str


class LiteralValue(_Frozen):
    """A constant: str, int, float, bool, None, or an empty list/dict."""

    expr: Literal["literal"] = "literal"
    value: Any = None


class KeyRef(_Frozen):
    """``source[key]``; fails if the key is absent."""

    expr: Literal["key"] = "key"
    source: Expr
    key: Expr


class KeyGet(_Frozen):
    """``source.get(key)``; None if the key is absent."""

    expr: Literal["key_get"] = "key_get"
    source: Expr
    key: Expr


class Decode(_Frozen):
    """
    Build an instance of ``target`` from a raw value.

    With ``method`` set this is a class-level call (``T.from_dict(v)``),
    otherwise the type itself is called (``T(v)``).
    """

    expr: Literal["decode"] = "decode"
    target: str
    method: str | None = None
    value: Expr


class Encode(_Frozen):
    """
    Turn a value into its raw form.

    Either call ``method`` on it (``v.to_dict()``) or pass it to the builtin
    ``function`` (``str(v)``).
    """

    expr: Literal["encode"] = "encode"
    value: Expr
    method: str | None = None
    function: str | None = None


class MapEach(_Frozen):
    """``[element for var in source]``, preserving order."""

    expr: Literal["map_each"] = "map_each"
    source: Expr
    var: str = "e"
    element: Expr


class IfPresent(_Frozen):
    """``then if value is not None else otherwise``."""

    expr: Literal["if_present"] = "if_present"
    value: Expr
    then: Expr
    otherwise: Expr = Field(default_factory=lambda: LiteralValue(value=None))


class MappingEntry(_Frozen):
    key: str
    value: Expr


class MappingExpr(_Frozen):
    """A dict display with string keys, in the given order."""

    expr: Literal["mapping"] = "mapping"
    entries: list[MappingEntry] = Field(default_factory=list)


Expr = Annotated[
    SelfRef
    | ParamRef
    | FieldRef
    | ClassRef
    | AttributeRef
    | LiteralValue
    | KeyRef
    | KeyGet
    | Decode
    | Encode
    | MapEach
    | IfPresent
    | MappingExpr,
    Field(discriminator="expr"),
]


class CallArgument(_Frozen):
    """A call argument; passed by keyword when ``name`` is set."""

    name: str | None = None
    value: Expr


# =============================================================================
# Checks
# =============================================================================


class ValueCheck(_Frozen):
    """
    Raise ``ValueError(message)`` unless ``subject`` has the ``raw`` shape.

    When ``nullable`` is set a None subject passes. ``member_of`` names an
    enum whose member names the subject must be one of.
    """

    subject: Expr
    raw: RawKind
    nullable: bool = False
    member_of: str | None = None
    message: str


# =============================================================================
# Body shapes
# =============================================================================


class Assignment(_Frozen):
    field: str
    value: Expr


class ReturnField(_Frozen):
    shape: Literal["return_field"] = "return_field"
    field: str


class ReturnValue(_Frozen):
    """Run checks, then return ``value``."""

    shape: Literal["return_value"] = "return_value"
    checks: list[ValueCheck] = Field(default_factory=list)
    value: Expr


class Initialize(_Frozen):
    """Run checks, optionally delegate to the base initializer, then assign."""

    shape: Literal["initialize"] = "initialize"
    checks: list[ValueCheck] = Field(default_factory=list)
    super_arguments: list[CallArgument] | None = None
    assignments: list[Assignment] = Field(default_factory=list)


class ConstructFrom(_Frozen):
    """Run checks, then return ``target(arguments...)``."""

    shape: Literal["construct_from"] = "construct_from"
    checks: list[ValueCheck] = Field(default_factory=list)
    target: Expr
    arguments: list[CallArgument] = Field(default_factory=list)


class PresenceGuardedDecode(_Frozen):
    """
    Decode ``value`` on first access, cache it under ``key`` in the ``cache``
    field, and return the cached value from then on.
    """

    shape: Literal["presence_guarded_decode"] = "presence_guarded_decode"
    cache: str
    key: str
    value: Expr


class EncodeToContainer(_Frozen):
    shape: Literal["encode_to_container"] = "encode_to_container"
    entries: list[MappingEntry] = Field(default_factory=list)


class SwitchCase(_Frozen):
    value: str
    target: str


class SwitchOnDiscriminant(_Frozen):
    """
    Run checks, bind ``subject`` to ``variable``, then construct the target
    of the first case whose value equals it. Raise ``error % variable`` when
    no case matches.
    """

    shape: Literal["switch_on_discriminant"] = "switch_on_discriminant"
    checks: list[ValueCheck] = Field(default_factory=list)
    subject: Expr
    variable: str
    cases: list[SwitchCase] = Field(default_factory=list)
    arguments: list[CallArgument] = Field(default_factory=list)
    error: str


class CompareFields(_Frozen):
    """Equal iff ``other`` has exactly the same class and all fields are equal."""

    shape: Literal["compare_fields"] = "compare_fields"
    fields: list[str] = Field(default_factory=list)


class HashValues(_Frozen):
    """Hash ``values`` together with the class, matching ``CompareFields``."""

    shape: Literal["hash_values"] = "hash_values"
    values: list[Expr] = Field(default_factory=list)


Body = Annotated[
    ReturnField
    | ReturnValue
    | Initialize
    | ConstructFrom
    | PresenceGuardedDecode
    | EncodeToContainer
    | SwitchOnDiscriminant
    | CompareFields
    | HashValues,
    Field(discriminator="shape"),
]


# =============================================================================
# Declarations
# =============================================================================


class ClassKind(str, Enum):
    FINAL = "final"
    ABSTRACT = "abstract"
    ENUM = "enum"
    INTERFACE = "interface"


class MethodBinding(str, Enum):
    INSTANCE = "instance"
    CLASS = "class"


class FieldDescriptor(_Frozen):
    name: str
    type: TypeRef = Field(default_factory=TypeRef)

    @property
    def nullable(self) -> bool:
        return self.type.nullable


class Parameter(_Frozen):
    """
    A method parameter. ``default`` of None means the parameter is required;
    a None default value is ``LiteralValue(value=None)``.
    """

    name: str
    type: TypeRef | None = None
    default: Expr | None = None
    keyword_only: bool = False


class MethodDescriptor(_Frozen):
    name: str
    params: list[Parameter] = Field(default_factory=list)
    return_type: TypeRef | None = None
    body: Body | None = None
    binding: MethodBinding = MethodBinding.INSTANCE
    abstract: bool = False


class Constant(_Frozen):
    name: str
    value: LiteralValue


class ClassDeclaration(_Frozen):
    """
    One class to emit.

    Attributes:
        namespace: Namespace the class lives in
        classname: Unqualified class name
        kind: Final, abstract, enum or interface (marker)
        extends: Base class, fully qualified
        implements: Marker classes, fully qualified
        fields: Instance fields in declaration order
        constants: Class-level constants (enum members)
        methods: Methods in emission order
        doc: Optional class docstring
    """

    namespace: str
    classname: str
    kind: ClassKind
    extends: str | None = None
    implements: list[str] = Field(default_factory=list)
    fields: list[FieldDescriptor] = Field(default_factory=list)
    constants: list[Constant] = Field(default_factory=list)
    methods: list[MethodDescriptor] = Field(default_factory=list)
    doc: str | None = None

    @property
    def fqcn(self) -> str:
        return f"{self.namespace}.{self.classname}"

    @property
    def bases(self) -> list[str]:
        return ([self.extends] if self.extends else []) + self.implements


for _model in (
    AttributeRef,
    KeyRef,
    KeyGet,
    Decode,
    Encode,
    MapEach,
    IfPresent,
    MappingEntry,
    MappingExpr,
    CallArgument,
    ValueCheck,
    Assignment,
    ReturnValue,
    Initialize,
    ConstructFrom,
    PresenceGuardedDecode,
    EncodeToContainer,
    SwitchOnDiscriminant,
    HashValues,
    Parameter,
    MethodDescriptor,
    ClassDeclaration,
):
    _model.model_rebuild()
