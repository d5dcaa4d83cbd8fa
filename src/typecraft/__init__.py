"""
typecraft - a compiler for value type declarations.

Pipeline: parse ``*.tc`` files, link them into a registry, generate class
declarations, and render them with a backend.
"""

from ._version import __version__

__all__ = ["__version__"]
