"""Value classification for the graph builder and serializer walker.

Every value met while walking an entity tree falls into exactly one
:class:`ValueKind`. Classification is by membership in the closed set of
model classes, never by inspecting attribute names.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from tessera.model.attrref import AttrRef
from tessera.model.composite import CompositeInstance
from tessera.model.declarable import Declarable, EntityKind
from tessera.model.intrinsic import Intrinsic
from tessera.model.outputs import BackendOutput


class ValueKind(str, Enum):
    RESOURCE = "resource"
    PROPERTY = "property"
    ATTR_REF = "attr_ref"
    INTRINSIC = "intrinsic"
    COMPOSITE = "composite"
    OUTPUT = "output"
    PLAIN = "plain"


def classify(value: Any) -> ValueKind:
    """Return the single kind *value* belongs to."""
    if isinstance(value, AttrRef):
        return ValueKind.ATTR_REF
    if isinstance(value, BackendOutput):
        return ValueKind.OUTPUT
    if isinstance(value, Intrinsic):
        return ValueKind.INTRINSIC
    if isinstance(value, CompositeInstance):
        return ValueKind.COMPOSITE
    if isinstance(value, Declarable):
        if value.kind is EntityKind.RESOURCE:
            return ValueKind.RESOURCE
        return ValueKind.PROPERTY
    return ValueKind.PLAIN


def is_entity(value: Any) -> bool:
    return isinstance(value, Declarable)


def is_resource(value: Any) -> bool:
    return classify(value) is ValueKind.RESOURCE


__all__ = ["ValueKind", "classify", "is_entity", "is_resource"]
