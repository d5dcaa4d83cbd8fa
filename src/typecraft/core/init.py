"""
Project initialization for typecraft.

Creates a starter ``typecraft.toml`` and an example DSL module.
"""

import re
from collections.abc import Callable
from pathlib import Path

from .errors import TypecraftError
from .fileset import DSL_SUFFIX
from .manifest import MANIFEST_NAME


class InitError(TypecraftError):
    """Raised when project initialization fails."""

    pass


MANIFEST_TEMPLATE = """[project]
name = "{{project_name}}"
version = "0.1.0"

[modules]
paths = ["types/"]

[output]
dir = "generated"
backend = "python"
"""

MODULE_TEMPLATE = """namespace {{namespace}}
use uuid.UUID

marker Identified;

string EmailAddress;

enum Status = Active | Suspended
data User : Identified = {
    UUID $id,
    EmailAddress $email,
    Status $status,
    ?string $nickname = null,
    string[] $tags = []
};

command UserCommand (UUID) =
    RegisterUser as 'user.register' (EmailAddress $email)
    | SuspendUser as 'user.suspend' ;
"""


def substitute_template_vars(content: str, variables: dict[str, str]) -> str:
    """
    Replace ``{{name}}`` placeholders in a template.

    Examples:
        >>> substitute_template_vars("name = {{project_name}}", {"project_name": "shop"})
        'name = shop'
    """
    for name, value in variables.items():
        content = content.replace(f"{{{{{name}}}}}", value)
    return content


def namespace_name(project_name: str) -> str:
    """
    Turn a project name into a namespace name.

    Examples:
        "my-shop" -> "MyShop"
        "billing service" -> "BillingService"
        "42" -> "Project42"
    """
    words = [w for w in re.split(r"[^A-Za-z0-9]+", project_name) if w]
    name = "".join(w[0].upper() + w[1:] for w in words)
    if not name:
        return "MyProject"
    if not name[0].isalpha():
        name = f"Project{name}"
    return name


def init_project(
    target_dir: Path,
    project_name: str | None = None,
    allow_existing: bool = False,
    progress_callback: Callable[[str], None] | None = None,
) -> None:
    """
    Initialize a new typecraft project.

    Args:
        target_dir: Directory to create the project in
        project_name: Project name (defaults to directory name)
        allow_existing: If True, allow initializing in a non-empty directory
        progress_callback: Optional callback for progress messages

    Raises:
        InitError: If initialization fails
    """

    def log(msg: str) -> None:
        if progress_callback:
            progress_callback(msg)

    if project_name is None:
        project_name = target_dir.resolve().name

    manifest_path = target_dir / MANIFEST_NAME
    if manifest_path.exists():
        raise InitError(f"{MANIFEST_NAME} already exists in {target_dir}")
    if target_dir.exists() and any(target_dir.iterdir()) and not allow_existing:
        raise InitError(f"Directory is not empty: {target_dir}")

    variables = {
        "project_name": project_name,
        "namespace": namespace_name(project_name),
    }
    module_path = target_dir / "types" / f"{variables['namespace'].lower()}{DSL_SUFFIX}"

    log(f"Initializing project '{project_name}'...")
    try:
        module_path.parent.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(
            substitute_template_vars(MANIFEST_TEMPLATE, variables), encoding="utf-8"
        )
        log(f"  Created {manifest_path}")
        module_path.write_text(substitute_template_vars(MODULE_TEMPLATE, variables), encoding="utf-8")
        log(f"  Created {module_path}")
    except OSError as e:
        raise InitError(f"Failed to create project files: {e}") from e
