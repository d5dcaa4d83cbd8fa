import logging
from pathlib import Path

from .manifest import ProjectManifest

logger = logging.getLogger(__name__)

DSL_SUFFIX = ".tc"


def discover_dsl_files(root: Path, manifest: ProjectManifest) -> list[Path]:
    """
    Collect the ``.tc`` files named by ``[modules].paths``.

    Directory entries are searched recursively, file entries are taken as
    given, and entries that do not exist are skipped. The result is sorted
    and free of duplicates, so the same project always parses in the same
    order.
    """
    found: set[Path] = set()
    for entry in manifest.module_paths:
        path = (root / entry).resolve()
        if path.is_file():
            found.add(path)
        elif path.is_dir():
            found.update(path.rglob(f"*{DSL_SUFFIX}"))
        else:
            logger.debug("Skipping missing module path %s", path)

    logger.info("Found %d DSL file(s) under %s", len(found), root)
    return sorted(found)
