"""Collecting exported bindings into the entity namespace."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from tessera.core.errors import DuplicateEntityError
from tessera.core.logging import get_logger
from tessera.model.composite import CompositeInstance, expand_composite
from tessera.model.declarable import Declarable
from tessera.model.kinds import ValueKind, classify
from tessera.model.outputs import BackendOutput

logger = get_logger(__name__)

EntityNamespace = dict[str, "Declarable | BackendOutput"]


@dataclass
class LoadedUnit:
    """Exported bindings of one successfully loaded source unit."""

    path: str
    bindings: Mapping[str, Any] = field(default_factory=dict)


class _Namespace:
    def __init__(self) -> None:
        self.entries: EntityNamespace = {}
        self._names_by_id: dict[int, str] = {}

    def insert(self, name: str, value: Declarable | BackendOutput, unit: str, *, origin: str | None = None) -> None:
        existing = self.entries.get(name)
        if existing is not None:
            if existing is value:
                return
            detail = f' from composite expansion of "{origin}"' if origin else ""
            raise DuplicateEntityError(
                name,
                unit,
                f'Duplicate entity name "{name}"{detail} found in {unit}',
            )

        first_name = self._names_by_id.get(id(value))
        if first_name is not None:
            # Same object bound under another name (e.g. ``alias = bucket``)
            logger.debug("entity_alias_skipped", name=name, entity=first_name, unit=unit)
            return

        self.entries[name] = value
        self._names_by_id[id(value)] = name


def collect_entities(units: Iterable[LoadedUnit]) -> EntityNamespace:
    """Build the entity namespace from loaded units, in unit order.

    Entities and cross-backend outputs are inserted under their export
    names, composites are expanded to ``{export}_{member}`` entities and
    all other bindings are ignored. An object already exported under one
    name is not inserted again under a second, different name; aliases are
    dropped and the first name (in unit order) is its logical name.

    Raises:
        DuplicateEntityError: Two different objects claim the same name.
    """
    namespace = _Namespace()
    expanded: dict[str, CompositeInstance] = {}

    for unit in units:
        for name, value in unit.bindings.items():
            kind = classify(value)
            if kind in (ValueKind.RESOURCE, ValueKind.PROPERTY, ValueKind.OUTPUT):
                namespace.insert(name, value, unit.path)
            elif kind is ValueKind.COMPOSITE:
                if expanded.get(name) is value:
                    continue
                expanded[name] = value
                for member_name, entity in expand_composite(name, value).items():
                    namespace.insert(member_name, entity, unit.path, origin=name)

    logger.debug("entities_collected", count=len(namespace.entries))
    return namespace.entries


__all__ = ["EntityNamespace", "LoadedUnit", "collect_entities"]
