"""Shared pytest fixtures for typecraft tests."""

import importlib
import sys
from pathlib import Path
from types import ModuleType

import pytest

from typecraft.backends.python import PythonBackend
from typecraft.core import ir
from typecraft.core.dsl_parser_impl import parse_dsl
from typecraft.core.linker import build_registry
from typecraft.core.linker_impl import Registry
from typecraft.generator import generate_declarations
from typecraft.generator.declarations import ClassDeclaration

SHOP_DSL = """
namespace Shop
use uuid.UUID

marker Named;
marker Auditable : Named;

string Email : Named;
int Quantity;

enum Color = Red | Green | Blue

data Tag = { string $label };

data Product : Auditable = {
    UUID $id,
    string $name,
    ?Email $contact,
    Quantity $stock,
    Color $color,
    Tag[] $tags,
    float $price = 9.5,
    bool $active = true
};

command ProductCommand (UUID) =
    AddProduct as 'product.add' (string $name, Quantity $stock, Tag[] $tags = [])
    | RemoveProduct as 'product.remove' ;
"""


def parse_text(text: str, name: str = "test.tc") -> ir.ModuleIR:
    """Parse DSL text as if read from ``name``."""
    return parse_dsl(text, Path(name))


def link_texts(*texts: str) -> Registry:
    """Parse each text as its own file and link them together."""
    return build_registry([parse_text(text, f"file{i}.tc") for i, text in enumerate(texts)])


def generate_texts(*texts: str) -> dict[str, ClassDeclaration]:
    return generate_declarations(link_texts(*texts))


@pytest.fixture
def shop_dsl() -> str:
    """Return a DSL module exercising every construct."""
    return SHOP_DSL


@pytest.fixture
def parse():
    return parse_text


@pytest.fixture
def link():
    return link_texts


@pytest.fixture
def generate():
    return generate_texts


@pytest.fixture
def render():
    """Return a function rendering DSL texts to generated Python files."""

    def _render(*texts: str) -> dict[Path, str]:
        return PythonBackend().render(generate_texts(*texts))

    return _render


@pytest.fixture
def import_generated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Return a function that writes rendered files below a temporary
    directory and imports one of the generated modules from there.
    """
    out = tmp_path / "generated"
    out.mkdir()
    monkeypatch.syspath_prepend(str(out))

    def _import(files: dict[Path, str], module: str) -> ModuleType:
        for relative, content in files.items():
            path = out / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        importlib.invalidate_caches()
        return importlib.import_module(module)

    yield _import

    for name, module in list(sys.modules.items()):
        file = getattr(module, "__file__", None)
        if file and Path(file).is_relative_to(out):
            del sys.modules[name]
