"""
Namespace-level IR types for typecraft.

A Namespace is the output of parsing one ``namespace`` block; a file may
contain several. ``ModuleIR`` ties the namespaces of one file to its path.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .arguments import Import
from .definitions import Definition


class Namespace(BaseModel):
    """
    A parsed namespace.

    Attributes:
        name: Dotted namespace path, e.g. ``Shop.Orders``
        imports: ``use`` lines in declaration order
        definitions: Declarations in source order
    """

    name: str
    imports: list[Import] = Field(default_factory=list)
    definitions: list[Definition] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def fqcn(self, classname: str) -> str:
        return f"{self.name}.{classname}"


class ModuleIR(BaseModel):
    """All namespaces parsed from one source file."""

    file: Path
    namespaces: list[Namespace] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)
