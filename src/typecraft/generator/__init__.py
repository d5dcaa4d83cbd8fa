"""
Code-structure generator for typecraft.

Turns a resolved registry into emission-ready class declarations. Generation
only starts once the registry is complete: a type's (de)serializer may call
into any other registered type.
"""

import logging

from ..core import ir
from ..core.errors import GenerationError
from ..core.linker_impl import Registry, RegistryEntry
from .builders import build_enum, build_marker, build_message, build_record, build_scalar
from .declarations import ClassDeclaration

logger = logging.getLogger(__name__)


def build_entry(entry: RegistryEntry, registry: Registry) -> dict[str, ClassDeclaration]:
    """Dispatch one entry to the builder of its variant."""
    match entry.definition:
        case ir.Marker() as marker:
            return build_marker(entry, marker, registry)
        case ir.EnumDef() as enum:
            return build_enum(entry, enum, registry)
        case ir.ScalarWrapper() as wrapper:
            return build_scalar(entry, wrapper, registry)
        case ir.Record() as record:
            return build_record(entry, record, registry)
        case ir.Message() as message:
            return build_message(entry, message, registry)


def generate_declarations(registry: Registry) -> dict[str, ClassDeclaration]:
    """
    Generate declarations for every registered definition.

    Args:
        registry: Complete, resolved registry

    Returns:
        Declarations keyed by fully-qualified classname, in registry order
        (a message's base class precedes its subclasses)

    Raises:
        GenerationError: If any definition cannot be generated; nothing is
            returned in that case
    """
    declarations: dict[str, ClassDeclaration] = {}

    for entry in registry:
        built = build_entry(entry, registry)
        for fqcn, declaration in built.items():
            if fqcn in declarations:
                raise GenerationError(
                    f"{fqcn} is generated twice (declared both as a type and as a constructor)"
                )
            declarations[fqcn] = declaration
        logger.debug("Generated %s: %s", entry.fqcn, ", ".join(built))

    logger.info("Generated %d class declaration(s)", len(declarations))
    return declarations


__all__ = [
    "ClassDeclaration",
    "build_entry",
    "generate_declarations",
]
