"""
Module layout of generated Python code.

Each namespace becomes one module. ``Shop.Orders`` is written to
``Shop/Orders.py``, unless another namespace lives below it (``Shop.Orders.Lines``),
in which case it becomes the package ``Shop/Orders/__init__.py``.
"""

from pathlib import Path

from ...generator.declarations import ClassDeclaration


def group_by_namespace(
    declarations: dict[str, ClassDeclaration],
) -> dict[str, list[ClassDeclaration]]:
    """Group declarations per namespace, keeping first-seen order."""
    groups: dict[str, list[ClassDeclaration]] = {}
    for declaration in declarations.values():
        groups.setdefault(declaration.namespace, []).append(declaration)
    return groups


def module_path(namespace: str, namespaces: set[str]) -> Path:
    parts = namespace.split(".")
    if any(other.startswith(namespace + ".") for other in namespaces):
        return Path(*parts, "__init__.py")
    return Path(*parts[:-1], f"{parts[-1]}.py")


def package_inits(module_paths: list[Path]) -> list[Path]:
    """``__init__.py`` files needed so every module is importable."""
    existing = set(module_paths)
    inits: list[Path] = []
    for path in module_paths:
        for parent in reversed(path.parents[:-1]):
            init = parent / "__init__.py"
            if init not in existing:
                existing.add(init)
                inits.append(init)
    return inits


def order_declarations(declarations: list[ClassDeclaration]) -> list[ClassDeclaration]:
    """
    Order declarations so that every base class defined in the same module
    precedes the classes extending it. Otherwise declaration order is kept.
    """
    local = {d.fqcn: d for d in declarations}
    ordered: list[ClassDeclaration] = []
    placed: set[str] = set()

    def place(declaration: ClassDeclaration, visiting: frozenset[str]) -> None:
        if declaration.fqcn in placed or declaration.fqcn in visiting:
            return
        for base in declaration.bases:
            if base in local:
                place(local[base], visiting | {declaration.fqcn})
        placed.add(declaration.fqcn)
        ordered.append(declaration)

    for declaration in declarations:
        place(declaration, frozenset())
    return ordered
