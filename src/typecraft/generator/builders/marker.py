from ...core import ir
from ...core.linker_impl import Registry, RegistryEntry
from ..declarations import ClassDeclaration, ClassKind
from .common import direct_markers


def build_marker(
    entry: RegistryEntry, marker: ir.Marker, registry: Registry
) -> dict[str, ClassDeclaration]:
    """A field-less capability class extending its parent markers."""
    declaration = ClassDeclaration(
        namespace=entry.namespace,
        classname=marker.classname,
        kind=ClassKind.INTERFACE,
        implements=direct_markers(marker.parents, registry),
    )
    return {entry.fqcn: declaration}
