"""Logical-name and attribute-reference resolution.

Two passes over the namespace, both required before serialization:

1. every entity records its namespace name as its logical name;
2. every attribute reference reachable from an entity (its own attribute
   accessors and any reference nested in its property bag) is pointed at
   the logical name of its parent, looked up by handle in the arena.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tessera.core.errors import DanglingReferenceError
from tessera.core.logging import get_logger
from tessera.model.arena import EntityArena
from tessera.model.attrref import AttrRef
from tessera.model.declarable import Declarable, EntityKind

logger = get_logger(__name__)


def resolve_logical_names(entities: Mapping[str, Any]) -> None:
    """Assign each entity its namespace name. Idempotent."""
    for name, entity in entities.items():
        if isinstance(entity, Declarable):
            entity.logical_name = name


def _resolve_ref(ref: AttrRef, arena: EntityArena, path: str) -> None:
    parent_name = arena.name_of(ref.parent_handle)
    if parent_name is None:
        raise DanglingReferenceError(path)
    ref.resolve(parent_name)


def _walk(value: Any, arena: EntityArena, path: str, visited: set[int]) -> None:
    if isinstance(value, AttrRef):
        _resolve_ref(value, arena, path)
        return
    if isinstance(value, (str, bytes, int, float, bool)) or value is None:
        return
    if id(value) in visited:
        return
    visited.add(id(value))

    if isinstance(value, Declarable):
        # Other resources own their references; property entities are inlined
        if value.kind is EntityKind.PROPERTY:
            for key, item in value.props.items():
                _walk(item, arena, f"{path}.{key}", visited)
        return
    if isinstance(value, Mapping):
        for key, item in value.items():
            _walk(item, arena, f"{path}.{key}", visited)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for index, item in enumerate(value):
            _walk(item, arena, f"{path}[{index}]", visited)


def resolve_attr_refs(entities: Mapping[str, Any], arena: EntityArena | None = None) -> EntityArena:
    """Resolve every attribute reference reachable from each entity.

    Raises:
        DanglingReferenceError: A reference's parent is not in the namespace.
            The error names the ``entity.path`` holding the reference.
    """
    arena = arena or EntityArena.from_namespace(entities)
    for name, entity in entities.items():
        if not isinstance(entity, Declarable):
            continue
        for accessor, ref in entity.attributes.items():
            _resolve_ref(ref, arena, f"{name}.{accessor}")
        visited: set[int] = {id(entity)}
        for key, value in entity.props.items():
            _walk(value, arena, f"{name}.{key}", visited)
    logger.debug("attr_refs_resolved", entities=len(entities))
    return arena


def resolve(entities: Mapping[str, Any]) -> EntityArena:
    """Run both resolution passes and return the arena used for lookups."""
    resolve_logical_names(entities)
    return resolve_attr_refs(entities)


__all__ = ["resolve", "resolve_attr_refs", "resolve_logical_names"]
