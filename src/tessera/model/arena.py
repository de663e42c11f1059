"""Entity handles and the handle-indexed entity arena.

Every entity receives a process-unique integer handle at construction.
Attribute references and cross-backend outputs store the handle of the
entity they point at, never the entity itself, so a reference cannot keep
its parent alive. After discovery the namespace is indexed once into an
:class:`EntityArena`; a handle missing from the arena is the "parent is not
part of this build" condition, reported as a plain lookup miss.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from tessera.model.declarable import Declarable

_handles = itertools.count(1)


def next_handle() -> int:
    """Allocate a new entity handle."""
    return next(_handles)


class EntityArena:
    """Eager handle → (name, entity) lookup table over one entity namespace.

    Only entities (``Declarable`` instances) are indexed. When the same entity
    appears under more than one name, the first name wins.
    """

    def __init__(self) -> None:
        self._entries: dict[int, tuple[str, Declarable]] = {}

    @classmethod
    def from_namespace(cls, entities: Mapping[str, Any]) -> EntityArena:
        from tessera.model.declarable import Declarable

        arena = cls()
        for name, value in entities.items():
            if isinstance(value, Declarable):
                arena.add(name, value)
        return arena

    def add(self, name: str, entity: Declarable) -> None:
        self._entries.setdefault(entity.handle, (name, entity))

    def get(self, handle: int) -> Declarable | None:
        """Return the entity for *handle*, or ``None`` when it is not in the arena."""
        entry = self._entries.get(handle)
        return entry[1] if entry else None

    def name_of(self, handle: int) -> str | None:
        """Return the namespace name for *handle*, or ``None`` when it is not in the arena."""
        entry = self._entries.get(handle)
        return entry[0] if entry else None

    def __contains__(self, handle: object) -> bool:
        return handle in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)


__all__ = ["EntityArena", "next_handle"]
