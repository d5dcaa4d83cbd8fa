"""
Backend plugin system for typecraft.

Backends render generated class declarations to a target language and write
them to disk. ``[output].backend`` in typecraft.toml (or ``build --backend``)
selects one by name.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from ..core.errors import BackendError
from ..generator.declarations import ClassDeclaration
from .base import GeneratorResult, write_files


class Backend(ABC):
    """
    Abstract base class for all typecraft backends.

    A backend is a pure emitter: it renders declarations in the order given
    and makes no semantic decisions.
    """

    @abstractmethod
    def render(self, declarations: dict[str, ClassDeclaration]) -> dict[Path, str]:
        """
        Render declarations to file contents.

        Args:
            declarations: Generated declarations keyed by fully-qualified classname

        Returns:
            File contents keyed by path relative to the output directory

        Raises:
            BackendError: If rendering fails
        """

    def generate(
        self, declarations: dict[str, ClassDeclaration], output_dir: Path
    ) -> GeneratorResult:
        """
        Render all declarations, then write them below ``output_dir``.

        Raises:
            BackendError: If rendering or writing fails
        """
        return write_files(self.render(declarations), output_dir)


class BackendRegistry:
    """Backend classes by name."""

    def __init__(self) -> None:
        self._backends: dict[str, type[Backend]] = {}

    def register(self, name: str, backend_class: type[Backend]) -> None:
        """
        Register a backend class.

        Raises:
            BackendError: If name already registered or class invalid
        """
        if name in self._backends:
            raise BackendError(
                f"Backend '{name}' is already registered. Cannot register {backend_class.__name__}."
            )

        if not issubclass(backend_class, Backend):
            raise BackendError(f"Backend class {backend_class.__name__} must extend Backend")

        self._backends[name] = backend_class

    def get(self, name: str) -> Backend:
        """
        Get a backend instance by name.

        Raises:
            BackendError: If backend not found
        """
        if name not in self._backends:
            available = ", ".join(self.list_backends())
            raise BackendError(f"Backend '{name}' not found. Available backends: {available}")

        return self._backends[name]()

    def list_backends(self) -> list[str]:
        return sorted(self._backends)


_registry: BackendRegistry | None = None


def get_registry() -> BackendRegistry:
    """
    Get the global backend registry, registering the built-in backends on
    first call.
    """
    global _registry
    if _registry is None:
        from .python import PythonBackend

        _registry = BackendRegistry()
        _registry.register("python", PythonBackend)
    return _registry


def get_backend(name: str) -> Backend:
    """
    Get a backend instance by name.

    Raises:
        BackendError: If backend not found
    """
    return get_registry().get(name)


__all__ = [
    "Backend",
    "BackendRegistry",
    "GeneratorResult",
    "get_backend",
    "get_registry",
]
