"""
Error types raised while compiling ``.tc`` files.

Every stage raises its own subclass of ``TypecraftError``; the CLI catches the
base class. Errors that can be pinned to a file carry an ``ErrorContext``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class TypecraftError(Exception):
    """Base exception for all typecraft errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.context is None:
            return self.message
        return f"{self.context.format()}\n{self.message}"


class ParseError(TypecraftError):
    """No parse of a file consumed all of its input."""


class LinkError(TypecraftError):
    """
    Parsed namespaces could not be merged into one registry.

    Raised for unknown type or marker references, duplicate definitions,
    conflicting constructors or discriminants, and marker cycles. The message
    lists every problem found in the failing stage.
    """


class GenerationError(TypecraftError):
    """A resolved definition has no valid class declaration."""


class BackendError(TypecraftError):
    """A backend is unknown, misconfigured, or could not write its output."""


class ConfigError(TypecraftError):
    """Raised when typecraft.toml is missing or malformed."""


@dataclass
class ErrorContext:
    """
    Where an error happened.

    Attributes:
        file: Source file
        line: 1-indexed line
        column: 1-indexed column
        snippet: Input left unconsumed at the error position, if known
        module: Namespace the error belongs to, if known
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None
    module: str | None = None

    def format(self) -> str:
        """
        Render as ``file:line:column [in namespace X]``, followed by the
        first line of the snippet with a caret under its first character.
        """
        header = f"{self.file}:{self.line}:{self.column}"
        if self.module:
            header += f" in namespace {self.module}"
        if not self.snippet:
            return header

        gutter = f"{self.line:4d} | "
        first_line = self.snippet.split("\n", 1)[0]
        return f"{header}\n{gutter}{first_line}\n{' ' * len(gutter)}^"


def make_parse_error(
    message: str,
    file: Path,
    line: int,
    column: int,
    snippet: str | None = None,
) -> ParseError:
    return ParseError(message, ErrorContext(file=file, line=line, column=column, snippet=snippet))


def make_link_error(
    message: str,
    file: Path | None = None,
    module: str | None = None,
) -> LinkError:
    """
    Build a LinkError, pointing at the start of ``file`` when one is known.

    The IR keeps no source positions, so resolver errors cannot name a line.
    """
    if file is None:
        return LinkError(message)
    return LinkError(message, ErrorContext(file=file, line=1, column=1, module=module))
