"""
Entity discovery: source units → entity namespace → resolved names → dependency graph.

Manifesto:
    Loading user code is the least predictable step of a build. One broken
    unit must not hide the entities of every other unit, so load failures
    are collected and the pass continues. Name collisions and dangling
    references are different: they make the namespace itself wrong, so they
    stop the pass at the step where they are found.

Architecture:
    ::

        find_source_units(root)          files.py    sorted *.py units
              ↓
        loader.load(unit)                loader.py   LoadError → errors[]
              ↓
        collect_entities(units)          collect.py  DuplicateEntityError → empty result
              ↓
        resolve(entities)                resolve.py  DanglingReferenceError → no graph
              ↓
        build_dependency_graph(entities) graph.py
              ↓
        DiscoveryResult(entities, dependencies, source_units, errors)

Examples:
    >>> units = InMemoryUnits({"a.py": {"bucket": bucket}, "b.py": {"func": func}})
    >>> result = discover("project", finder=units.find, loader=units)
    >>> result.dependencies["func"]
    {'bucket'}

Tags:
    discovery, entity-namespace, dependency-graph, tessera-core
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tessera.core.errors import DiscoveryError, LoadError, ResolutionError
from tessera.core.logging import get_logger
from tessera.core.settings import TesseraSettings, get_settings
from tessera.discovery.collect import EntityNamespace, LoadedUnit, collect_entities
from tessera.discovery.cycles import detect_cycles, normalize_cycle_key
from tessera.discovery.files import find_source_units
from tessera.discovery.graph import DependencyGraph, build_dependency_graph
from tessera.discovery.loader import InMemoryUnits, ModuleUnitLoader, UnitLoader
from tessera.discovery.resolve import resolve, resolve_attr_refs, resolve_logical_names

logger = get_logger(__name__)

UnitFinder = Callable[[Path], Sequence[Path | str]]


@dataclass
class DiscoveryResult:
    """Everything discovery found under one root."""

    entities: EntityNamespace = field(default_factory=dict)
    dependencies: DependencyGraph = field(default_factory=dict)
    source_units: list[str] = field(default_factory=list)
    errors: list[DiscoveryError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def discover(
    root: Path | str,
    *,
    settings: TesseraSettings | None = None,
    finder: UnitFinder | None = None,
    loader: UnitLoader | None = None,
) -> DiscoveryResult:
    """Discover, resolve and graph the entities declared under *root*.

    Args:
        root: Project directory
        settings: Scanning settings (defaults to :func:`get_settings`)
        finder: Replaces :func:`find_source_units`
        loader: Replaces :class:`ModuleUnitLoader`
    """
    root = Path(root)
    settings = settings or get_settings()
    units = list(finder(root) if finder else find_source_units(root, settings))
    result = DiscoveryResult(source_units=[str(unit) for unit in units])

    loaded: list[LoadedUnit] = []
    active = loader or ModuleUnitLoader(root)
    context: AbstractContextManager[Any] = (
        active if isinstance(active, AbstractContextManager) else nullcontext(active)
    )
    with context:
        for unit in units:
            try:
                bindings = active.load(unit)
            except LoadError as exc:
                logger.warning("unit_load_failed", unit=str(unit), error=exc.message)
                result.errors.append(exc)
                continue
            loaded.append(LoadedUnit(str(unit), bindings))

    try:
        entities = collect_entities(loaded)
    except ResolutionError as exc:
        logger.error("entity_collection_failed", error=exc.message, unit=exc.file)
        result.errors.append(exc)
        return result
    result.entities = entities

    try:
        arena = resolve(entities)
    except ResolutionError as exc:
        logger.error("reference_resolution_failed", error=exc.message)
        result.errors.append(exc)
        return result

    result.dependencies = build_dependency_graph(entities, arena)
    logger.info(
        "discovery_complete",
        root=str(root),
        units=len(units),
        entities=len(entities),
        errors=len(result.errors),
    )
    return result


__all__ = [
    "DiscoveryResult",
    "InMemoryUnits",
    "LoadedUnit",
    "ModuleUnitLoader",
    "UnitLoader",
    "build_dependency_graph",
    "collect_entities",
    "detect_cycles",
    "discover",
    "find_source_units",
    "normalize_cycle_key",
    "resolve",
    "resolve_attr_refs",
    "resolve_logical_names",
]
