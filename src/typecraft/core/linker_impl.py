"""
Linker implementation for typecraft.

Handles the global symbol table, type reference resolution, structural
checks on messages, and reference validation.
"""

from collections import Counter
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from . import ir
from .builtins import is_builtin
from .errors import LinkError, make_link_error

NAMESPACE_SEPARATOR = "."


@dataclass(frozen=True)
class RegistryEntry:
    """
    A resolved definition together with where it came from.

    Attributes:
        namespace: Namespace the definition was declared in
        definition: Definition with every type reference fully qualified
        file: Source file, when known
    """

    namespace: str
    definition: ir.Definition
    file: Path | None = None

    @property
    def fqcn(self) -> str:
        return f"{self.namespace}{NAMESPACE_SEPARATOR}{self.definition.classname}"


@dataclass(frozen=True)
class Registry:
    """
    Read-only table of every resolved definition, keyed by fully-qualified
    classname, in declaration order.
    """

    entries: Mapping[str, RegistryEntry] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, fqcn: str) -> RegistryEntry | None:
        return self.entries.get(fqcn)

    def __contains__(self, fqcn: object) -> bool:
        return fqcn in self.entries

    def __iter__(self) -> Iterator[RegistryEntry]:
        return iter(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def namespaces(self) -> list[str]:
        seen: dict[str, None] = {}
        for entry in self:
            seen.setdefault(entry.namespace, None)
        return list(seen)


@dataclass
class SymbolTable:
    """
    Symbol table for tracking all definitions across files.

    The same namespace may be spread over several files; its definitions
    are merged, but a classname may only be declared once per namespace.
    """

    entries: dict[str, tuple[ir.Namespace, ir.Definition]] = field(default_factory=dict)

    # Track which file each symbol came from (for error reporting)
    symbol_sources: dict[str, Path] = field(default_factory=dict)

    def add(self, namespace: ir.Namespace, definition: ir.Definition, file: Path) -> None:
        """Add a definition, checking for duplicates within its namespace."""
        fqcn = namespace.fqcn(definition.classname)
        if fqcn in self.entries:
            existing = self.symbol_sources.get(fqcn, "unknown")
            raise make_link_error(
                f"Duplicate definition '{definition.classname}' in namespace "
                f"'{namespace.name}' (first declared in '{existing}')",
                file=file,
                module=namespace.name,
            )
        self.entries[fqcn] = (namespace, definition)
        self.symbol_sources[fqcn] = file


def build_symbol_table(modules: list[ir.ModuleIR]) -> SymbolTable:
    """Merge every namespace of every module into one table."""
    symbols = SymbolTable()
    for module in modules:
        for namespace in module.namespaces:
            for definition in namespace.definitions:
                symbols.add(namespace, definition, module.file)
    return symbols


# =============================================================================
# Type reference resolution
# =============================================================================


def resolve_type(type_ref: str, namespace: ir.Namespace) -> str:
    """
    Resolve a raw type reference to its fully-qualified form.

    In order of precedence:
    1. scalar keywords are returned unchanged
    2. an import aliased as ``type_ref`` resolves to that import's path
    3. an unaliased import whose path equals ``type_ref`` keeps it as is
    4. an import whose last path segment equals ``type_ref`` resolves to
       that import's path
    5. anything else is assumed local: ``<namespace>.<type_ref>``
    """
    if ir.is_scalar(type_ref):
        return type_ref

    for imported in namespace.imports:
        if imported.alias == type_ref:
            return imported.path

    for imported in namespace.imports:
        if imported.alias is None and imported.path == type_ref:
            return type_ref

    for imported in namespace.imports:
        if imported.path.split(NAMESPACE_SEPARATOR)[-1] == type_ref:
            return imported.path

    return namespace.fqcn(type_ref)


def _resolve_argument(argument: ir.Argument, namespace: ir.Namespace) -> ir.Argument:
    if argument.type is None:
        return argument
    return argument.model_copy(update={"type": resolve_type(argument.type, namespace)})


def _resolve_arguments(arguments: list[ir.Argument], namespace: ir.Namespace) -> list[ir.Argument]:
    return [_resolve_argument(a, namespace) for a in arguments]


def _resolve_all(refs: list[str], namespace: ir.Namespace) -> list[str]:
    return [resolve_type(r, namespace) for r in refs]


def default_discriminant(namespace: str, classname: str) -> str:
    return f"{namespace}{NAMESPACE_SEPARATOR}{classname}"


def resolve_definition(definition: ir.Definition, namespace: ir.Namespace) -> ir.Definition:
    """
    Return a copy of ``definition`` with every type reference fully qualified
    and every message constructor's discriminant filled in.
    """
    match definition:
        case ir.Marker():
            return definition.model_copy(
                update={"parents": _resolve_all(definition.parents, namespace)}
            )
        case ir.EnumDef():
            return definition
        case ir.ScalarWrapper():
            return definition.model_copy(
                update={"markers": _resolve_all(definition.markers, namespace)}
            )
        case ir.Record():
            return definition.model_copy(
                update={
                    "markers": _resolve_all(definition.markers, namespace),
                    "arguments": _resolve_arguments(definition.arguments, namespace),
                }
            )
        case ir.Message():
            constructors = [
                c.model_copy(
                    update={
                        "discriminant": c.discriminant
                        or default_discriminant(namespace.name, c.classname),
                        "arguments": _resolve_arguments(c.arguments, namespace),
                    }
                )
                for c in definition.constructors
            ]
            id_fields = [
                f.model_copy(update={"type": resolve_type(f.type, namespace)})
                for f in definition.id_fields
            ]
            return definition.model_copy(
                update={
                    "markers": _resolve_all(definition.markers, namespace),
                    "id_fields": id_fields,
                    "constructors": constructors,
                }
            )


# =============================================================================
# Structural checks
# =============================================================================


def validate_message(message: ir.Message, fqcn: str) -> list[str]:
    """
    Check the constructor invariants of a resolved message.

    Returns:
        Error messages; empty when the message is well formed
    """
    errors: list[str] = []

    classnames = Counter(c.classname for c in message.constructors)
    for classname, count in classnames.items():
        if count > 1:
            errors.append(f"{fqcn}: duplicate constructor '{classname}'")

    discriminants = Counter(c.discriminant for c in message.constructors)
    for discriminant, count in discriminants.items():
        if count > 1:
            errors.append(f"{fqcn}: duplicate discriminant '{discriminant}'")

    if len(message.constructors) > 1 and message.classname in classnames:
        errors.append(
            f"{fqcn}: has a subtype defined with the same name "
            f"(only allowed when there is exactly one constructor)"
        )

    return errors


def _referenced_types(definition: ir.Definition) -> list[tuple[str, str]]:
    """``(field, resolved type)`` pairs a definition depends on for data."""
    match definition:
        case ir.Record():
            return [(a.name, a.type) for a in definition.arguments if a.type and not a.is_scalar]
        case ir.Message():
            refs = [(f.name, f.type) for f in definition.id_fields]
            for c in definition.constructors:
                refs.extend(
                    (f"{c.classname}.{a.name}", a.type)
                    for a in c.arguments
                    if a.type and not a.is_scalar
                )
            return refs
        case _:
            return []


def _marker_refs(definition: ir.Definition) -> list[str]:
    match definition:
        case ir.Marker():
            return definition.parents
        case ir.ScalarWrapper() | ir.Record() | ir.Message():
            return definition.markers
        case _:
            return []


def validate_references(entries: Mapping[str, RegistryEntry]) -> list[str]:
    """
    Check that every resolved reference exists.

    Field and id types must name a definition or a built-in; marker lists
    must name marker definitions.
    """
    errors: list[str] = []

    for fqcn, entry in entries.items():
        for field_name, type_ref in _referenced_types(entry.definition):
            if type_ref not in entries and not is_builtin(type_ref):
                errors.append(f"{fqcn}: field '{field_name}' references unknown type '{type_ref}'")

        for marker in _marker_refs(entry.definition):
            target = entries.get(marker)
            if target is None:
                errors.append(f"{fqcn}: unknown marker '{marker}'")
            elif not isinstance(target.definition, ir.Marker):
                errors.append(f"{fqcn}: '{marker}' is not a marker")

    return errors


def find_marker_cycles(entries: Mapping[str, RegistryEntry]) -> list[str]:
    """
    Find markers that (indirectly) extend themselves.

    Returns:
        One message per cycle, e.g. ``"Shop.A -> Shop.B -> Shop.A"``
    """
    parents = {
        fqcn: entry.definition.parents
        for fqcn, entry in entries.items()
        if isinstance(entry.definition, ir.Marker)
    }
    done: set[str] = set()
    errors: list[str] = []

    def visit(fqcn: str, path: list[str]) -> None:
        if fqcn in path:
            cycle = path[path.index(fqcn) :] + [fqcn]
            errors.append("marker cycle: " + " -> ".join(cycle))
            return
        if fqcn in done:
            return
        for parent in parents.get(fqcn, []):
            visit(parent, path + [fqcn])
        done.add(fqcn)

    for fqcn in parents:
        visit(fqcn, [])
    return errors


def resolve_entries(symbols: SymbolTable) -> dict[str, RegistryEntry]:
    """Resolve every definition of the symbol table, keeping its order."""
    return {
        fqcn: RegistryEntry(
            namespace=namespace.name,
            definition=resolve_definition(definition, namespace),
            file=symbols.symbol_sources.get(fqcn),
        )
        for fqcn, (namespace, definition) in symbols.entries.items()
    }


def freeze(entries: dict[str, RegistryEntry]) -> Registry:
    return Registry(entries=MappingProxyType(dict(entries)))


def raise_if_errors(title: str, errors: list[str]) -> None:
    if errors:
        raise LinkError(f"{title}:\n" + "\n".join(f"  - {e}" for e in errors))
