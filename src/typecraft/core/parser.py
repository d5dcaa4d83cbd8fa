import logging
from pathlib import Path

from . import ir
from .dsl_parser_impl import parse_dsl

logger = logging.getLogger(__name__)


def parse_modules(files: list[Path]) -> list[ir.ModuleIR]:
    """
    Parse DSL files into ModuleIR structures.

    Each file is parsed on its own; nothing in one file influences the parse
    of another, so the order of ``files`` only affects the order of the
    result.

    Args:
        files: List of .tc file paths to parse

    Returns:
        List of ModuleIR objects, one per file

    Raises:
        ParseError: On the first file that fails to parse
    """
    modules: list[ir.ModuleIR] = []

    for f in files:
        text = f.read_text(encoding="utf-8")
        modules.append(parse_dsl(text, f))

    logger.info("Parsed %d file(s)", len(modules))
    return modules
