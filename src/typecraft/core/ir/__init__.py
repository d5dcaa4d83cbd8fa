"""
typecraft Intermediate Representation (IR) types.

The IR is the immutable syntax tree produced by the grammar layer and
consumed by the linker and the generator. All types are re-exported here.
"""

from .arguments import (
    SCALAR_KEYWORDS,
    Argument,
    Import,
    ScalarKind,
    is_scalar,
    rename_reserved_arguments,
)
from .definitions import (
    Constructor,
    Definition,
    EnumDef,
    IdField,
    Marker,
    Message,
    MessageKind,
    Record,
    ScalarWrapper,
)
from .namespace import ModuleIR, Namespace

__all__ = [
    "SCALAR_KEYWORDS",
    "Argument",
    "Constructor",
    "Definition",
    "EnumDef",
    "IdField",
    "Import",
    "Marker",
    "Message",
    "MessageKind",
    "ModuleIR",
    "Namespace",
    "Record",
    "ScalarKind",
    "ScalarWrapper",
    "is_scalar",
    "rename_reserved_arguments",
]
