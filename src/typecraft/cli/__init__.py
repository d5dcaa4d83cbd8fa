"""
typecraft CLI Package.

- project.py: init, validate, inspect and build commands
- utils.py: version information, logging setup, project loading
"""

import typer

from typecraft.cli.project import build_command, init_command, inspect_command, validate_command
from typecraft.cli.utils import configure_logging, get_version, version_callback

app = typer.Typer(
    help="""typecraft – value type compiler

Reads *.tc declarations (records, enums, scalar wrappers, markers, commands
and events) and generates classes with validation and (de)serialization.

Project commands operate on typecraft.toml in the CURRENT directory
(or the one given with --manifest).
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """typecraft CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="init")(init_command)
app.command(name="validate")(validate_command)
app.command(name="inspect")(inspect_command)
app.command(name="build")(build_command)


def main() -> None:
    app()


__all__ = [
    "app",
    "get_version",
    "main",
    "version_callback",
]
