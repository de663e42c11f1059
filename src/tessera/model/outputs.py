"""Cross-backend outputs.

A :class:`BackendOutput` exposes one backend's entity attribute under a named
output so that entities of another backend (or another project) can consume
it. Unlike an :class:`~tessera.model.attrref.AttrRef` it serializes to an
output-name marker, never to a backend-native reference.
"""

from __future__ import annotations

from typing import Any

from tessera.model.attrref import AttrRef

OUTPUT_MARKER = "tessera::output"


def auto_output_name(entity_name: str, attribute: str) -> str:
    """Name of the output created automatically for a cross-backend reference."""
    return f"{entity_name}_{attribute}"


class BackendOutput:
    """A named bridge from ``source_backend``'s entity attribute to other backends.

    ``source_entity`` stays empty until the build assigns it.
    """

    def __init__(self, ref: AttrRef, output_name: str):
        self.source_handle = ref.parent_handle
        self.source_backend = ref.parent_backend
        self.source_attribute = ref.attribute
        self.output_name = output_name
        self.source_entity = ""

    @classmethod
    def auto(cls, ref: AttrRef, entity_name: str) -> BackendOutput:
        """Create an output named ``{entity}_{attribute}`` with the source entity already known."""
        instance = cls(ref, auto_output_name(entity_name, ref.attribute))
        instance.source_entity = entity_name
        return instance

    def set_source_entity(self, name: str) -> None:
        self.source_entity = name

    def to_json(self) -> dict[str, Any]:
        return {OUTPUT_MARKER: self.output_name}

    def __repr__(self) -> str:
        source = self.source_entity or f"#{self.source_handle}"
        return f"BackendOutput({self.output_name!r} <- {self.source_backend}:{source}.{self.source_attribute})"


def output(ref: AttrRef, name: str) -> BackendOutput:
    """Declare an explicit cross-backend output of *ref* named *name*."""
    return BackendOutput(ref, name)


__all__ = ["BackendOutput", "OUTPUT_MARKER", "auto_output_name", "output"]
