import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

MANIFEST_NAME = "typecraft.toml"


@dataclass
class OutputConfig:
    """Where and how generated code is written."""

    dir: str = "generated"
    backend: str = "python"


@dataclass
class ProjectManifest:
    name: str
    version: str = "0.1.0"
    module_paths: list[str] = field(default_factory=lambda: ["types/"])
    output: OutputConfig = field(default_factory=OutputConfig)


def load_manifest(path: Path) -> ProjectManifest:
    if not path.exists():
        raise ConfigError(f"Manifest not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    project = data.get("project", {})
    modules = data.get("modules", {})
    output_data = data.get("output", {})

    paths = modules.get("paths", ["types/"])
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise ConfigError(f"[modules].paths must be a list of strings in {path}")

    output = OutputConfig(
        dir=output_data.get("dir", "generated"),
        backend=output_data.get("backend", "python"),
    )

    return ProjectManifest(
        name=project.get("name", path.parent.name),
        version=project.get("version", "0.1.0"),
        module_paths=paths,
        output=output,
    )
