"""Intrinsic values: backend computed values that render themselves.

Intrinsics are leaves to the dependency graph builder and are delegated to
their own :meth:`Intrinsic.to_json` by the serializer walker.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from tessera.core.errors import SerializationError
from tessera.model.attrref import AttrRef
from tessera.model.declarable import Declarable

InterpolationValueSerializer = Callable[[Any], str]


class Intrinsic(ABC):
    """Base class for backend intrinsic values."""

    @abstractmethod
    def to_json(self) -> Any:
        """Render to the backend's output form."""


class PseudoParameter(Intrinsic):
    """A reference to a value the target platform provides (region, account, ...)."""

    def __init__(self, ref_name: str):
        self.ref_name = ref_name

    def to_json(self) -> dict[str, str]:
        return {"Ref": self.ref_name}

    def __str__(self) -> str:
        return "${" + self.ref_name + "}"

    def __repr__(self) -> str:
        return f"PseudoParameter({self.ref_name!r})"


def create_pseudo_parameters(name_map: Mapping[str, str]) -> dict[str, PseudoParameter]:
    """Build ``{key: PseudoParameter(ref_name)}`` from a name map."""
    return {key: PseudoParameter(ref_name) for key, ref_name in name_map.items()}


def default_interpolation_serializer(
    serialize_attr_ref: Callable[[str, str], str],
    serialize_ref: Callable[[str], str],
) -> InterpolationValueSerializer:
    """Return a value serializer for interpolated strings.

    Attribute references render through *serialize_attr_ref*, intrinsics whose
    output is a ``{"Ref": name}`` through *serialize_ref*, other intrinsics
    through ``str()``. Embedding an entity directly is an error.
    """

    def serialize(value: Any) -> str:
        if isinstance(value, AttrRef):
            if value.logical_name is None:
                raise SerializationError(
                    f'Cannot interpolate attribute reference "{value.attribute}": logical name not set'
                )
            return serialize_attr_ref(value.logical_name, value.attribute)
        if isinstance(value, Intrinsic):
            rendered = value.to_json()
            if isinstance(rendered, dict) and "Ref" in rendered:
                return serialize_ref(rendered["Ref"])
            return str(value)
        if isinstance(value, Declarable):
            raise SerializationError(
                "Cannot embed an entity directly in an interpolated string; use one of its attributes"
            )
        return str(value)

    return serialize


def build_interpolated_string(
    parts: Sequence[str],
    values: Sequence[Any],
    serialize_value: InterpolationValueSerializer,
) -> str:
    """Interleave literal *parts* with serialized *values*."""
    result = []
    for index, part in enumerate(parts):
        result.append(part)
        if index < len(values):
            result.append(serialize_value(values[index]))
    return "".join(result)


__all__ = [
    "Intrinsic",
    "InterpolationValueSerializer",
    "PseudoParameter",
    "build_interpolated_string",
    "create_pseudo_parameters",
    "default_interpolation_serializer",
]
