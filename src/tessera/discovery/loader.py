"""
Loading source units into exported bindings.

Two loaders satisfy :class:`UnitLoader`:

- :class:`ModuleUnitLoader` imports each unit as a module named after its
  path relative to the project root (``src/storage.py`` → ``src.storage``),
  so a binding re-exported through an aggregation unit is the same object
  in both units. ``sys.path`` and ``sys.modules`` are restored on exit.
- :class:`InMemoryUnits` serves bindings from a dict, for tests and for
  front ends that register entities without touching the filesystem.

Any exception raised while loading a unit becomes a :class:`LoadError`
carrying the unit path.
"""

from __future__ import annotations

import importlib
import sys
import types
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from tessera.core.errors import LoadError
from tessera.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class UnitLoader(Protocol):
    """Loads one source unit and returns its exported bindings."""

    def load(self, path: Path | str) -> dict[str, Any]: ...


def exported_bindings(module: types.ModuleType) -> dict[str, Any]:
    """Return ``__all__`` if the module defines it, else its public non-module globals."""
    namespace = vars(module)
    names = namespace.get("__all__")
    if names is not None:
        return {name: namespace[name] for name in names if name in namespace}
    return {
        name: value
        for name, value in namespace.items()
        if not name.startswith("_") and not isinstance(value, types.ModuleType)
    }


def module_name_for(path: Path, root: Path) -> str:
    """Dotted module name of *path* relative to *root*."""
    relative = path.resolve().relative_to(root.resolve()).with_suffix("")
    parts = list(relative.parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts:
        raise ValueError(f"Cannot derive a module name for {path}")
    return ".".join(parts)


class ModuleUnitLoader:
    """Import source units under *root* as modules.

    Use as a context manager; modules imported from *root* are removed from
    ``sys.modules`` when the context exits so a later build sees fresh code.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()
        self._preexisting: set[str] = set()
        self._added_path = False

    def __enter__(self) -> ModuleUnitLoader:
        self._preexisting = set(sys.modules)
        root = str(self.root)
        if root not in sys.path:
            sys.path.insert(0, root)
            self._added_path = True
        importlib.invalidate_caches()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._added_path:
            try:
                sys.path.remove(str(self.root))
            except ValueError:
                logger.debug("sys_path_entry_missing", root=str(self.root))
            self._added_path = False
        for name in set(sys.modules) - self._preexisting:
            module = sys.modules.get(name)
            if module is not None and self._owns(module):
                del sys.modules[name]

    def _owns(self, module: types.ModuleType) -> bool:
        location = getattr(module, "__file__", None)
        if location:
            return Path(location).resolve().is_relative_to(self.root)
        search = getattr(module, "__path__", None)
        return bool(search) and any(Path(entry).resolve().is_relative_to(self.root) for entry in search)

    def _check_shadowing(self, name: str, path: Path) -> None:
        module = sys.modules.get(name)
        if module is None or name not in self._preexisting:
            return
        location = getattr(module, "__file__", None)
        if location is None or Path(location).resolve() != path.resolve():
            raise ImportError(f"module name {name!r} is already taken by {location or 'a built-in module'}")

    def load(self, path: Path | str) -> dict[str, Any]:
        path = Path(path)
        try:
            name = module_name_for(path, self.root)
            self._check_shadowing(name, path)
            module = importlib.import_module(name)
        except Exception as exc:
            raise LoadError(str(path), f"{type(exc).__name__}: {exc}", cause=exc) from exc
        bindings = exported_bindings(module)
        logger.debug("unit_loaded", unit=str(path), module=name, exports=len(bindings))
        return bindings


class InMemoryUnits:
    """In-memory source units: ``{path: bindings}``.

    A value that is an exception instance is raised as a load failure of that
    unit. Usable both as the unit finder and as the loader of :func:`discover`.
    """

    def __init__(self, units: Mapping[str, Mapping[str, Any] | BaseException]):
        self.units = dict(units)

    def __enter__(self) -> InMemoryUnits:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None

    def find(self, root: Path | str | None = None) -> list[str]:
        return sorted(self.units)

    def load(self, path: Path | str) -> dict[str, Any]:
        key = str(path)
        if key not in self.units:
            raise LoadError(key, "No such unit")
        value = self.units[key]
        if isinstance(value, BaseException):
            raise LoadError(key, str(value), cause=value if isinstance(value, Exception) else None)
        return dict(value)


__all__ = [
    "InMemoryUnits",
    "ModuleUnitLoader",
    "UnitLoader",
    "exported_bindings",
    "module_name_for",
]
