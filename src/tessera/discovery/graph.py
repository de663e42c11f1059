"""Dependency graph construction.

For every entity in the namespace, its property tree is scanned for
references to other resource-kind entities:

- an attribute reference whose parent is another resource adds an edge;
  a reference to one of the root's own attributes never does;
- a resource used directly as a value adds an edge and is not entered;
- the root itself met again as a value anywhere in its own tree adds a
  self-edge (the root counts as already seen when its scan starts);
- a property-kind entity adds no edge, its props are scanned inline;
- intrinsics, cross-backend outputs and composites end the scan.

Each root gets its own identity-based visited set, so cyclic object graphs
terminate and a shared sub-object is scanned once per root.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tessera.core.logging import get_logger
from tessera.model.arena import EntityArena
from tessera.model.attrref import AttrRef
from tessera.model.declarable import Declarable, EntityKind
from tessera.model.kinds import ValueKind, classify

logger = get_logger(__name__)

DependencyGraph = dict[str, set[str]]


class _RootScan:
    def __init__(self, root: Declarable, arena: EntityArena):
        self.root = root
        self.arena = arena
        self.dependencies: set[str] = set()
        self.visited: set[int] = {id(root)}

    def _edge_to(self, handle: int) -> None:
        target = self.arena.get(handle)
        if target is None or target.kind is not EntityKind.RESOURCE:
            return
        name = self.arena.name_of(handle)
        if name is not None:
            self.dependencies.add(name)

    def scan(self, value: Any) -> None:
        kind = classify(value)

        if kind is ValueKind.ATTR_REF:
            ref: AttrRef = value
            if ref.parent_handle != self.root.handle:
                self._edge_to(ref.parent_handle)
            return

        if kind is ValueKind.RESOURCE:
            if value is self.root:
                self._edge_to(self.root.handle)
            else:
                self._edge_to(value.handle)
            return

        if kind is ValueKind.PROPERTY:
            if id(value) in self.visited:
                return
            self.visited.add(id(value))
            for item in value.props.values():
                self.scan(item)
            return

        if kind is not ValueKind.PLAIN:
            return

        if isinstance(value, Mapping):
            items = value.values()
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = value
        else:
            return
        if id(value) in self.visited:
            return
        self.visited.add(id(value))
        for item in items:
            self.scan(item)


def build_dependency_graph(
    entities: Mapping[str, Any],
    arena: EntityArena | None = None,
) -> DependencyGraph:
    """Map each entity name to the names of the resources it directly depends on."""
    arena = arena or EntityArena.from_namespace(entities)
    graph: DependencyGraph = {}
    for name, entity in entities.items():
        if not isinstance(entity, Declarable):
            continue
        root_scan = _RootScan(entity, arena)
        for value in entity.props.values():
            root_scan.scan(value)
        graph[name] = root_scan.dependencies

    logger.debug(
        "dependency_graph_built",
        nodes=len(graph),
        edges=sum(len(deps) for deps in graph.values()),
    )
    return graph


__all__ = ["DependencyGraph", "build_dependency_graph"]
