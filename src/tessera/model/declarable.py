"""
Declarable entities: the resources and property objects users declare.

A declarable carries a backend id, an entity-type tag, a kind and an opaque
property bag. Identity is object identity; two entities with identical
props are still two entities.

Manifesto:
    - **Resource vs property:** Resources are referenced by name wherever
      they appear as a value. Properties are always inlined.
    - **Handles, not back-pointers:** Each entity owns a process-unique
      handle. Its attribute references carry the handle, never the entity.
    - **Generated constructors:** Backends build typed constructors with
      :func:`resource_type` / :func:`property_type` instead of subclassing
      by hand.

Examples:
    >>> Bucket = resource_type("Storage::Bucket", "template", {"arn": "Arn"})
    >>> bucket = Bucket(BucketName="logs")
    >>> bucket.props
    {'BucketName': 'logs'}
    >>> bucket.arn.attribute
    'Arn'

Tags:
    entity-model, declarable, resource, property, tessera-core
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar

from tessera.model.arena import next_handle
from tessera.model.attrref import AttrRef


class EntityKind(str, Enum):
    """How an entity is rendered when it appears as a value."""

    RESOURCE = "resource"
    PROPERTY = "property"


def _normalize_attributes(attributes: Mapping[str, str] | Iterable[str] | None) -> dict[str, str]:
    if attributes is None:
        return {}
    if isinstance(attributes, Mapping):
        return dict(attributes)
    return {name: name for name in attributes}


class Declarable:
    """Base class for every entity tracked by a build.

    Args:
        backend: Backend id (e.g. ``"template"``)
        entity_type: Entity-type tag (e.g. ``"Storage::Bucket"``)
        props: Property bag, stored as a new dict
        attributes: Declared output attributes. A mapping of accessor name
            to backend attribute name, or an iterable of names used as both.
    """

    kind: ClassVar[EntityKind]

    def __init__(
        self,
        backend: str,
        entity_type: str,
        props: Mapping[str, Any] | None = None,
        attributes: Mapping[str, str] | Iterable[str] | None = None,
    ):
        self.backend = backend
        self.entity_type = entity_type
        self.props: dict[str, Any] = dict(props or {})
        self.handle = next_handle()
        self.logical_name: str | None = None
        self.attributes: dict[str, AttrRef] = {
            accessor: AttrRef(self.handle, backend, attr_name)
            for accessor, attr_name in _normalize_attributes(attributes).items()
        }

    def __getattr__(self, name: str) -> AttrRef:
        # Only reached when normal lookup fails
        attributes = self.__dict__.get("attributes")
        if attributes is not None and name in attributes:
            return attributes[name]
        raise AttributeError(
            f"{type(self).__name__!s} ({self.__dict__.get('entity_type', '?')}) has no attribute {name!r}"
        )

    def attr(self, name: str) -> AttrRef:
        """Return the attribute reference for *name* (accessor or backend name)."""
        if name in self.attributes:
            return self.attributes[name]
        for ref in self.attributes.values():
            if ref.attribute == name:
                return ref
        raise KeyError(f"{self.entity_type} declares no attribute {name!r}")

    def __repr__(self) -> str:
        label = self.logical_name or f"#{self.handle}"
        return f"{type(self).__name__}({self.backend}:{self.entity_type} {label})"


class Resource(Declarable):
    """A resource-kind entity. Always serialized as a reference by name."""

    kind = EntityKind.RESOURCE


class Property(Declarable):
    """A property-kind entity. Always inlined into its parent."""

    kind = EntityKind.PROPERTY


def _entity_type(
    base: type[Declarable],
    entity_type: str,
    backend: str,
    attributes: Mapping[str, str] | Iterable[str] | None,
    name: str | None,
) -> type[Declarable]:
    declared = _normalize_attributes(attributes)

    def __init__(self: Declarable, props: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        base.__init__(self, backend, entity_type, {**(props or {}), **kwargs}, declared)

    class_name = name or entity_type.rsplit("::", 1)[-1].replace(".", "_")
    return type(
        class_name,
        (base,),
        {
            "__init__": __init__,
            "__doc__": f"{base.kind.value.capitalize()} {entity_type} ({backend}).",
            "TYPE": entity_type,
            "BACKEND": backend,
            "ATTRIBUTES": declared,
        },
    )


def resource_type(
    entity_type: str,
    backend: str,
    attributes: Mapping[str, str] | Iterable[str] | None = None,
    *,
    name: str | None = None,
) -> type[Resource]:
    """Create a resource constructor class for one entity type."""
    return _entity_type(Resource, entity_type, backend, attributes, name)  # type: ignore[return-value]


def property_type(
    entity_type: str,
    backend: str,
    *,
    name: str | None = None,
) -> type[Property]:
    """Create a property constructor class for one entity type."""
    return _entity_type(Property, entity_type, backend, None, name)  # type: ignore[return-value]


def create_resource(
    backend: str,
    entity_type: str,
    attributes: Mapping[str, str] | Iterable[str] | None = None,
    props: Mapping[str, Any] | None = None,
) -> Resource:
    """Construct a resource entity with one attribute reference per declared attribute."""
    return Resource(backend, entity_type, props, attributes)


def create_property(
    backend: str,
    entity_type: str,
    props: Mapping[str, Any] | None = None,
) -> Property:
    """Construct a property entity."""
    return Property(backend, entity_type, props)


class ChildProject(Resource):
    """A nested project built separately and deployed as a single unit.

    Backends create these through their own factories (e.g. a nested stack).
    The build pipeline builds ``project_path`` recursively and stores the
    result on :attr:`build_result`.
    """

    def __init__(
        self,
        backend: str,
        entity_type: str,
        project_path: str | Path,
        *,
        options: Mapping[str, Any] | None = None,
        outputs: Iterable[str] = (),
        attribute_format: str = "{}",
        props: Mapping[str, Any] | None = None,
    ):
        output_names = list(outputs)
        super().__init__(
            backend,
            entity_type,
            props,
            {name: attribute_format.format(name) for name in output_names},
        )
        self.project_path = Path(project_path)
        self.options: dict[str, Any] = dict(options or {})
        self.output_names = output_names
        self.build_result: Any = None


__all__ = [
    "ChildProject",
    "Declarable",
    "EntityKind",
    "Property",
    "Resource",
    "create_property",
    "create_resource",
    "property_type",
    "resource_type",
]
