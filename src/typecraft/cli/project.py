"""
Project commands for typecraft CLI.

- init: Create a starter manifest and DSL module
- validate: Parse, resolve and generate without writing
- inspect: Show the registered definitions
- build: Generate code and write it to the output directory
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from typecraft.backends import get_backend
from typecraft.core import ir
from typecraft.core.errors import ParseError, TypecraftError
from typecraft.core.init import InitError, init_project
from typecraft.core.linker_impl import Registry, RegistryEntry

from .utils import load_project

console = Console()


# =============================================================================
# Helper Functions
# =============================================================================


def _markers(definition: ir.Definition) -> list[str]:
    match definition:
        case ir.Marker():
            return definition.parents
        case ir.ScalarWrapper() | ir.Record() | ir.Message():
            return definition.markers
        case _:
            return []


def _argument_summary(argument: ir.Argument) -> str:
    type_ = argument.type or "mixed"
    if argument.is_list:
        type_ += "[]"
    if argument.nullable:
        type_ = "?" + type_
    summary = f"{type_} ${argument.name}"
    if argument.default is not None:
        summary += f" = {argument.default}"
    return summary


def _details(definition: ir.Definition) -> str:
    """One-line description of a definition's contents."""
    match definition:
        case ir.Marker():
            return ""
        case ir.EnumDef():
            return " | ".join(definition.constructors)
        case ir.ScalarWrapper():
            return definition.kind.value
        case ir.Record():
            return ", ".join(_argument_summary(a) for a in definition.arguments)
        case ir.Message():
            ids = ", ".join(f.type for f in definition.id_fields)
            constructors = " | ".join(
                f"{c.classname} as '{c.discriminant}'" for c in definition.constructors
            )
            return f"({ids}) {constructors}"


def _variant(entry: RegistryEntry) -> str:
    definition = entry.definition
    if isinstance(definition, ir.Message):
        return definition.kind.value
    return definition.variant


def _print_table(registry: Registry) -> None:
    table = Table(title="Definitions")
    table.add_column("Class", style="bold")
    table.add_column("Kind")
    table.add_column("Markers", style="dim")
    table.add_column("Details")

    for entry in registry:
        table.add_row(
            entry.fqcn,
            _variant(entry),
            ", ".join(_markers(entry.definition)),
            _details(entry.definition),
        )
    console.print(table)


def _registry_json(registry: Registry) -> str:
    return json.dumps(
        [
            {
                "fqcn": entry.fqcn,
                "namespace": entry.namespace,
                "file": str(entry.file) if entry.file else None,
                "definition": entry.definition.model_dump(mode="json"),
            }
            for entry in registry
        ],
        indent=2,
    )


# =============================================================================
# Commands
# =============================================================================


def init_command(
    path: Path = typer.Argument(Path("."), help="Directory to initialize"),
    name: str | None = typer.Option(None, "--name", "-n", help="Project name"),
    here: bool = typer.Option(False, "--here", help="Allow a non-empty directory"),
) -> None:
    """
    Create typecraft.toml and an example module in PATH.
    """
    try:
        init_project(path, project_name=name, allow_existing=here, progress_callback=typer.echo)
    except InitError as e:
        typer.echo(f"Initialization failed: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo("Next: typecraft validate && typecraft build")


def validate_command(
    manifest: str = typer.Option(
        "typecraft.toml", "--manifest", "-m", help="Path to typecraft.toml"
    ),
) -> None:
    """
    Parse all DSL modules, resolve references, and check that every type
    can be generated. Nothing is written.
    """
    try:
        project = load_project(manifest)
        declarations = project.declarations()
    except ParseError as e:
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)
    except TypecraftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"OK: {len(project.registry)} definitions, {len(declarations)} classes "
        f"in {len(project.registry.namespaces())} namespaces"
    )


def inspect_command(
    manifest: str = typer.Option("typecraft.toml", "--manifest", "-m"),
    format: str = typer.Option("table", "--format", "-f", help="Output format: 'table' or 'json'"),
) -> None:
    """
    Show every registered definition with its resolved references.
    """
    if format not in ("table", "json"):
        typer.echo(f"Unknown format: {format}", err=True)
        raise typer.Exit(code=1)

    try:
        project = load_project(manifest)
    except (ParseError, TypecraftError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if format == "json":
        typer.echo(_registry_json(project.registry))
    else:
        _print_table(project.registry)


def build_command(
    manifest: str = typer.Option("typecraft.toml", "--manifest", "-m"),
    out: str | None = typer.Option(
        None, "--out", "-o", help="Output directory (overrides [output].dir)"
    ),
    backend: str | None = typer.Option(
        None, "--backend", "-b", help="Backend (overrides [output].backend)"
    ),
) -> None:
    """
    Generate code for every definition and write it to the output directory.

    Nothing is written if any file fails to parse, resolve or generate.
    """
    try:
        project = load_project(manifest)
        declarations = project.declarations()

        output = project.manifest.output
        output_dir = Path(out) if out else project.root / output.dir
        result = get_backend(backend or output.backend).generate(declarations, output_dir)
    except ParseError as e:
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)
    except TypecraftError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Wrote {len(result.files_created)} files to {output_dir}")
