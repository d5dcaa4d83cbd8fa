import logging

from . import ir
from .errors import LinkError
from .linker_impl import (
    Registry,
    build_symbol_table,
    find_marker_cycles,
    freeze,
    raise_if_errors,
    resolve_entries,
    validate_message,
    validate_references,
)

logger = logging.getLogger(__name__)


def build_registry(modules: list[ir.ModuleIR]) -> Registry:
    """
    Merge and resolve all parsed modules into one registry.

    Performs:
    1. Symbol table building (detects duplicate definitions per namespace)
    2. Type reference resolution through imports
    3. Message structure checks (constructor names, discriminants)
    4. Reference validation, including marker cycles

    The registry is complete before anything is generated from it, since a
    type's generated code may call into any other type's.

    Args:
        modules: Parsed modules, one per file

    Returns:
        Immutable registry of resolved definitions

    Raises:
        LinkError: If linking fails (duplicates, unresolved refs, etc.)
    """
    if not modules:
        raise LinkError("No modules to link")

    # 1. Build symbol table (detects duplicates)
    symbols = build_symbol_table(modules)

    # 2. Resolve references
    entries = resolve_entries(symbols)

    # 3. Structural checks on messages
    errors: list[str] = []
    for fqcn, entry in entries.items():
        if isinstance(entry.definition, ir.Message):
            errors.extend(validate_message(entry.definition, fqcn))
    raise_if_errors("Invalid message definition", errors)

    # 4. Validate all cross-references
    raise_if_errors("Reference validation failed", validate_references(entries))
    raise_if_errors("Invalid marker hierarchy", find_marker_cycles(entries))

    registry = freeze(entries)
    logger.info(
        "Registered %d definition(s) across %d namespace(s)",
        len(registry),
        len(registry.namespaces()),
    )
    return registry
