"""
typecraft CLI Utilities.

Shared utility functions used across CLI modules.
"""

import logging
import platform
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer

from typecraft._version import __version__
from typecraft.core.errors import ConfigError
from typecraft.core.fileset import DSL_SUFFIX, discover_dsl_files
from typecraft.core.linker import build_registry
from typecraft.core.linker_impl import Registry
from typecraft.core.manifest import ProjectManifest, load_manifest
from typecraft.core.parser import parse_modules
from typecraft.generator import generate_declarations
from typecraft.generator.declarations import ClassDeclaration

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def get_version() -> str:
    """Get typecraft version from package metadata."""
    try:
        return version("typecraft")
    except PackageNotFoundError:
        return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"typecraft {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format=LOG_FORMAT)


@dataclass
class Project:
    """A loaded project: its manifest, root directory and resolved registry."""

    manifest: ProjectManifest
    root: Path
    registry: Registry

    def declarations(self) -> dict[str, ClassDeclaration]:
        return generate_declarations(self.registry)


def load_project(manifest: str) -> Project:
    """
    Load the manifest, then parse and link every DSL file it points to.

    Raises:
        ConfigError: If the manifest is missing or malformed
        ParseError: If a DSL file fails to parse
        LinkError: If the parsed modules cannot be resolved
    """
    manifest_path = Path(manifest).resolve()
    root = manifest_path.parent

    mf = load_manifest(manifest_path)
    dsl_files = discover_dsl_files(root, mf)
    if not dsl_files:
        raise ConfigError(f"No {DSL_SUFFIX} files found in {', '.join(mf.module_paths)}")
    modules = parse_modules(dsl_files)
    registry = build_registry(modules)
    return Project(manifest=mf, root=root, registry=registry)
