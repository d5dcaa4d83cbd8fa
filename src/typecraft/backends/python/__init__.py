"""
Python backend.

Writes one module per namespace, plus the package ``__init__.py`` files
needed to import them, e.g. for namespaces ``Shop`` and ``Shop.Orders``:

    generated/
        Shop/
            __init__.py      # namespace Shop
            Orders.py        # namespace Shop.Orders
"""

import logging
from pathlib import Path

from ...generator.declarations import ClassDeclaration
from .. import Backend
from .layout import group_by_namespace, module_path, package_inits
from .renderer import ModuleRenderer

logger = logging.getLogger(__name__)

PACKAGE_INIT = '"""Generated by typecraft. Do not edit."""\n'


class PythonBackend(Backend):
    """Render declarations as plain Python classes."""

    def render(self, declarations: dict[str, ClassDeclaration]) -> dict[Path, str]:
        groups = group_by_namespace(declarations)
        namespaces = set(groups)

        files: dict[Path, str] = {}
        for namespace, members in groups.items():
            path = module_path(namespace, namespaces)
            files[path] = ModuleRenderer(namespace, members).render()
            logger.debug("Rendered %s (%d classes)", path, len(members))

        for init in package_inits(list(files)):
            files[init] = PACKAGE_INIT

        logger.info("Rendered %d module(s)", len(groups))
        return files


__all__ = ["ModuleRenderer", "PythonBackend"]
