"""Source unit enumeration."""

from __future__ import annotations

import os
from fnmatch import fnmatch
from pathlib import Path

from tessera.core.logging import get_logger
from tessera.core.settings import TesseraSettings, get_settings

logger = get_logger(__name__)


def is_test_unit(filename: str, settings: TesseraSettings) -> bool:
    return any(fnmatch(filename, pattern) for pattern in settings.test_patterns)


def find_source_units(root: Path | str, settings: TesseraSettings | None = None) -> list[Path]:
    """List the source units under *root* in a stable, sorted order.

    Test units and excluded or hidden directories are skipped. A directory
    holding the boundary marker is a project source root: the first one met
    (or *root* itself, when it holds the marker) is scanned, every other one
    is a child project and is left to whoever builds it. Unreadable
    directories are skipped.
    """
    settings = settings or get_settings()
    root = Path(root)
    units: list[Path] = []
    source_root: Path | None = root if (root / settings.boundary_marker).is_file() else None

    def scan(directory: Path) -> None:
        nonlocal source_root
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("directory_skipped", directory=str(directory), reason=str(exc))
            return

        for entry in entries:
            path = Path(entry.path)
            if entry.is_dir():
                if entry.name in settings.excluded_dirs or entry.name.startswith("."):
                    continue
                if (path / settings.boundary_marker).is_file():
                    if source_root is not None:
                        logger.debug("child_project_skipped", directory=str(path))
                        continue
                    source_root = path
                scan(path)
            elif entry.is_file():
                if entry.name.endswith(settings.source_suffix) and not is_test_unit(entry.name, settings):
                    units.append(path)

    scan(root)
    logger.debug("source_units_found", root=str(root), count=len(units))
    return units


__all__ = ["find_source_units", "is_test_unit"]
