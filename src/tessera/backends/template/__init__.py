"""Reference ``template`` backend: JSON templates with Ref / Fn::GetAtt references."""

from tessera.backends.template.checks import (
    TEMPLATE_CHECKS,
    circular_references,
    find_resource_refs,
    parse_template,
    reference_graph,
    unknown_references,
)
from tessera.backends.template.intrinsics import PSEUDO, Sub, sub
from tessera.backends.template.resources import BACKEND, Parameter, nested_stack, prop, resource
from tessera.backends.template.serializer import TemplateSerializer, TemplateVisitor, pascal_case

__all__ = [
    "BACKEND",
    "PSEUDO",
    "Parameter",
    "Sub",
    "TEMPLATE_CHECKS",
    "TemplateSerializer",
    "TemplateVisitor",
    "circular_references",
    "find_resource_refs",
    "nested_stack",
    "parse_template",
    "pascal_case",
    "prop",
    "reference_graph",
    "resource",
    "sub",
    "unknown_references",
]
