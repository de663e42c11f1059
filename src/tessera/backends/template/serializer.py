"""
Template serializer: renders template-backend entities to a JSON template.

Output shape::

    {
      "FormatVersion": "tessera-template/1",
      "Parameters": {"Env": {"Type": "String", "Default": "dev"}},
      "Resources": {
        "bucket": {"Type": "Storage::Bucket", "Properties": {...}},
        "func":   {"Type": "Compute::Function", "Properties": {
                     "Role": {"Fn::GetAtt": ["role", "Arn"]},
                     "Bucket": {"Ref": "bucket"}}}
      },
      "Outputs": {"bucket_arn": {"Value": {"Fn::GetAtt": ["bucket", "Arn"]}}}
    }

Property keys are converted to PascalCase. References to entities of other
backends render as cross-backend output markers. Child projects become
``Template::Stack`` resources and their templates are returned as extra
files named ``{child}.template.json``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from tessera.backends.registry import register_backend
from tessera.backends.template.checks import TEMPLATE_CHECKS, find_resource_refs
from tessera.backends.template.resources import BACKEND, PARAMETER_TYPE, Parameter
from tessera.core.logging import get_logger
from tessera.model.declarable import ChildProject, Declarable, EntityKind
from tessera.model.outputs import OUTPUT_MARKER, BackendOutput, auto_output_name
from tessera.serialization.serializer import Serializer, SerializerResult
from tessera.serialization.walker import Walk, walk_value
from tessera.validation import PostSynthCheck

logger = get_logger(__name__)

FORMAT_VERSION = "tessera-template/1"
BASE_PATH_PARAMETER = "TemplateBasePath"


def pascal_case(key: str) -> str:
    """``bucket_name`` / ``bucketName`` / ``BucketName`` → ``BucketName``."""
    if not key:
        return key
    if "_" in key or "-" in key:
        return "".join(part[:1].upper() + part[1:] for part in key.replace("-", "_").split("_") if part)
    return key[:1].upper() + key[1:]


class TemplateVisitor:
    """Walker hooks for template output.

    ``local_names`` are the logical names rendered in this template; an
    attribute reference to any other entity crossed a backend boundary and
    is rendered by *cross_ref* from its automatic output name.
    """

    def __init__(
        self,
        local_names: set[str],
        convert_keys: bool = True,
        cross_ref: Callable[[str], Any] | None = None,
    ):
        self.local_names = local_names
        self.convert_keys = convert_keys
        self.cross_ref = cross_ref or (lambda output_name: {OUTPUT_MARKER: output_name})

    def attr_ref(self, logical_name: str, attribute: str) -> Any:
        if logical_name not in self.local_names:
            return self.cross_ref(auto_output_name(logical_name, attribute))
        return {"Fn::GetAtt": [logical_name, attribute]}

    def resource_ref(self, logical_name: str) -> Any:
        return {"Ref": logical_name}

    def property_declarable(self, entity: Declarable, walk: Walk) -> Any:
        rendered = {pascal_case(key): walk(value) for key, value in entity.props.items() if value is not None}
        return rendered or None

    def transform_key(self, key: str) -> str:
        return pascal_case(key) if self.convert_keys else key


@register_backend(BACKEND)
class TemplateSerializer(Serializer):
    """Serializer for the ``template`` backend."""

    name = BACKEND
    primary_filename = "main.template.json"

    def serialize(
        self,
        entities: Mapping[str, Declarable],
        outputs: Sequence[BackendOutput] = (),
        dependencies: Mapping[str, set[str]] | None = None,
    ) -> SerializerResult:
        dependencies = dependencies or {}
        visitor = TemplateVisitor(set(entities), cross_ref=self.serialize_cross_ref)
        children = {name: entity for name, entity in entities.items() if isinstance(entity, ChildProject)}

        template: dict[str, Any] = {"FormatVersion": FORMAT_VERSION}
        parameters: dict[str, Any] = {}
        resources: dict[str, Any] = {}

        if children:
            parameters[BASE_PATH_PARAMETER] = {
                "Type": "String",
                "Default": ".",
                "Description": "Base path of nested stack templates",
            }

        for name, entity in entities.items():
            if entity.kind is EntityKind.PROPERTY:
                continue
            if self._is_parameter(entity):
                raw = TemplateVisitor(visitor.local_names, convert_keys=False, cross_ref=visitor.cross_ref)
                parameters[name] = walk_value(entity.props, raw)
            elif isinstance(entity, ChildProject):
                resources[name] = self._stack_resource(name, entity, visitor)
            else:
                local = {
                    dep
                    for dep in dependencies.get(name, set())
                    if dep in entities and not self._is_parameter(entities[dep])
                }
                resources[name] = self._resource(name, entity, visitor, local)

        if parameters:
            template["Parameters"] = parameters
        template["Resources"] = resources

        if outputs:
            template["Outputs"] = {
                item.output_name: {"Value": {"Fn::GetAtt": [item.source_entity, item.source_attribute]}}
                for item in outputs
            }

        logger.debug("template_rendered", resources=len(resources), parameters=len(parameters))
        return SerializerResult(
            primary=json.dumps(template, indent=2),
            files=self._child_files(children),
        )

    @staticmethod
    def _is_parameter(entity: Declarable) -> bool:
        return isinstance(entity, Parameter) or entity.entity_type == PARAMETER_TYPE

    def _resource(
        self,
        name: str,
        entity: Declarable,
        visitor: TemplateVisitor,
        depends_on: set[str],
    ) -> dict[str, Any]:
        rendered: dict[str, Any] = {"Type": entity.entity_type}
        properties = {
            pascal_case(key): walk_value(value, visitor) for key, value in entity.props.items() if value is not None
        }
        if properties:
            rendered["Properties"] = properties
        implicit = find_resource_refs(properties)
        explicit = sorted(dep for dep in depends_on if dep != name and dep not in implicit)
        if explicit:
            rendered["DependsOn"] = explicit
        return rendered

    def _stack_resource(self, name: str, child: ChildProject, visitor: TemplateVisitor) -> dict[str, Any]:
        parameters: dict[str, Any] = {BASE_PATH_PARAMETER: {"Ref": BASE_PATH_PARAMETER}}
        for key, value in (child.options.get("parameters") or {}).items():
            parameters[key] = walk_value(value, visitor)
        return {
            "Type": child.entity_type,
            "Properties": {
                "TemplateURL": {"Fn::Sub": "${" + BASE_PATH_PARAMETER + "}/" + f"{name}.template.json"},
                "Parameters": parameters,
            },
        }

    def _child_files(self, children: Mapping[str, ChildProject]) -> dict[str, str]:
        files: dict[str, str] = {}
        for name, child in children.items():
            child_result = getattr(child.build_result, "outputs", {}).get(self.name)
            if child_result is None:
                logger.warning("child_template_missing", child=name)
                continue
            if isinstance(child_result, str):
                files[f"{name}.template.json"] = child_result
            else:
                files[f"{name}.template.json"] = child_result.primary
                files.update(child_result.files)
        return files

    def post_synth_checks(self) -> list[PostSynthCheck]:
        return list(TEMPLATE_CHECKS)


__all__ = ["TemplateSerializer", "TemplateVisitor", "pascal_case"]
