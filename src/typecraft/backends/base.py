"""
Shared pieces for backends: the result type and file writing helpers.
"""

from dataclasses import dataclass, field
from pathlib import Path

from ..core.errors import BackendError


@dataclass
class GeneratorResult:
    """
    Result from a backend run.

    Attributes:
        files_created: Files that were created or overwritten, in write order
    """

    files_created: list[Path] = field(default_factory=list)

    def add_file(self, path: Path) -> None:
        self.files_created.append(path)


def write_files(files: dict[Path, str], output_dir: Path) -> GeneratorResult:
    """
    Write rendered files below ``output_dir``.

    Rendering happens before this is called, so a render failure never
    leaves partial output behind.

    Raises:
        BackendError: If a file cannot be written
    """
    result = GeneratorResult()
    for relative, content in files.items():
        path = output_dir / relative
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise BackendError(f"Failed to write {path}: {e}") from e
        result.add_file(path)
    return result
