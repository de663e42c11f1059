"""Resource constructors of the template backend."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from tessera.model.declarable import ChildProject, Property, Resource, property_type, resource_type

BACKEND = "template"
STACK_TYPE = "Template::Stack"
PARAMETER_TYPE = "Template::Parameter"


def resource(entity_type: str, attributes: Mapping[str, str] | Iterable[str] = ()) -> type[Resource]:
    """Constructor class for a template resource type.

    >>> Bucket = resource("Storage::Bucket", {"arn": "Arn", "bucket_name": "BucketName"})
    >>> Bucket(BucketName="logs").arn.attribute
    'Arn'
    """
    return resource_type(entity_type, BACKEND, attributes)


def prop(entity_type: str) -> type[Property]:
    """Constructor class for a template property type (always inlined)."""
    return property_type(entity_type, BACKEND)


class Parameter(Resource):
    """A template input parameter, referenced with ``{"Ref": name}``."""

    def __init__(self, type: str = "String", *, default: Any = None, description: str | None = None):
        props: dict[str, Any] = {"Type": type}
        if default is not None:
            props["Default"] = default
        if description is not None:
            props["Description"] = description
        super().__init__(BACKEND, PARAMETER_TYPE, props)


def nested_stack(
    project_path: str | Path,
    *,
    parameters: Mapping[str, Any] | None = None,
    outputs: Iterable[str] = (),
) -> ChildProject:
    """Declare a child project deployed as a nested stack.

    Each name in *outputs* becomes an attribute reading the child's output,
    e.g. ``network.vpc_id`` renders as ``{"Fn::GetAtt": ["network", "Outputs.vpc_id"]}``.
    """
    return ChildProject(
        BACKEND,
        STACK_TYPE,
        project_path,
        options={"parameters": dict(parameters or {})},
        outputs=outputs,
        attribute_format="Outputs.{}",
    )


__all__ = ["BACKEND", "PARAMETER_TYPE", "STACK_TYPE", "Parameter", "nested_stack", "prop", "resource"]
