"""Generic value walker shared by every backend serializer.

Dispatch order for a value:

1. ``None`` passes through
2. :class:`AttrRef` → ``visitor.attr_ref(logical_name, attribute)``; must be resolved
3. intrinsic or cross-backend output → its own ``to_json()``
4. resource-kind entity → ``visitor.resource_ref(logical_name)``; must be named
5. property-kind entity → ``visitor.property_declarable(entity, walk)``
6. list / tuple / set → element-wise, rendered as a list
7. mapping → entry-wise, keys passed through ``visitor.transform_key`` if defined
8. anything else passes through
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from tessera.core.errors import SerializationError
from tessera.model.declarable import Declarable
from tessera.model.kinds import ValueKind, classify

Walk = Callable[[Any], Any]


@runtime_checkable
class SerializerVisitor(Protocol):
    """Backend hooks used by :func:`walk_value`.

    A visitor may also define ``transform_key(key: str) -> str``; it is
    optional and looked up at walk time.
    """

    def attr_ref(self, logical_name: str, attribute: str) -> Any: ...

    def resource_ref(self, logical_name: str) -> Any: ...

    def property_declarable(self, entity: Declarable, walk: Walk) -> Any: ...


def walk_value(value: Any, visitor: SerializerVisitor) -> Any:
    """Transform *value* into the visitor's output form."""
    if value is None:
        return None

    kind = classify(value)

    if kind is ValueKind.ATTR_REF:
        if value.logical_name is None:
            raise SerializationError(
                f'Cannot serialize attribute reference "{value.attribute}": logical name not set'
            )
        return visitor.attr_ref(value.logical_name, value.attribute)

    if kind in (ValueKind.INTRINSIC, ValueKind.OUTPUT):
        return value.to_json()

    if kind is ValueKind.RESOURCE:
        if value.logical_name is None:
            raise SerializationError(
                f"Cannot serialize a reference to {value.entity_type}: entity has no logical name"
            )
        return visitor.resource_ref(value.logical_name)

    if kind is ValueKind.PROPERTY:
        return visitor.property_declarable(value, lambda item: walk_value(item, visitor))

    if kind is ValueKind.COMPOSITE:
        raise SerializationError(
            f"Cannot serialize composite {value.definition.name!r}: composites must be exported to be expanded"
        )

    if isinstance(value, (list, tuple, set, frozenset)):
        return [walk_value(item, visitor) for item in value]

    if isinstance(value, Mapping):
        transform_key = getattr(visitor, "transform_key", None)
        return {
            (transform_key(key) if transform_key is not None else key): walk_value(item, visitor)
            for key, item in value.items()
        }

    return value


__all__ = ["SerializerVisitor", "Walk", "walk_value"]
