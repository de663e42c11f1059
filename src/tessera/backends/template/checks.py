"""Post-synthesis checks over rendered templates."""

from __future__ import annotations

import json
from typing import Any

from tessera.backends.template.intrinsics import PSEUDO_PREFIX
from tessera.backends.template.resources import BACKEND
from tessera.discovery.cycles import detect_cycles
from tessera.validation import Diagnostic, PostSynthCheck, PostSynthContext, Severity


def parse_template(output: Any) -> dict[str, Any] | None:
    """Parse a rendered template (string or serializer result); ``None`` if it is not a JSON object."""
    raw = output if isinstance(output, str) else output.primary
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def find_resource_refs(value: Any) -> set[str]:
    """Names referenced through ``Ref`` or ``Fn::GetAtt`` anywhere in *value*.

    Pseudo-parameter refs are not included.
    """
    refs: set[str] = set()

    def walk(item: Any) -> None:
        if isinstance(item, list):
            for element in item:
                walk(element)
            return
        if not isinstance(item, dict):
            return
        ref = item.get("Ref")
        if isinstance(ref, str) and not ref.startswith(PSEUDO_PREFIX):
            refs.add(ref)
        get_att = item.get("Fn::GetAtt")
        if isinstance(get_att, list) and get_att and isinstance(get_att[0], str):
            refs.add(get_att[0])
        elif isinstance(get_att, str) and get_att:
            refs.add(get_att.split(".", 1)[0])
        for element in item.values():
            walk(element)

    walk(value)
    return refs


def _depends_on(resource: dict[str, Any]) -> list[str]:
    depends_on = resource.get("DependsOn") or []
    return [depends_on] if isinstance(depends_on, str) else list(depends_on)


def reference_graph(template: dict[str, Any]) -> dict[str, set[str]]:
    """Resource → resources it references (through properties or ``DependsOn``)."""
    resources = template.get("Resources") or {}
    graph: dict[str, set[str]] = {}
    for logical_id, resource in resources.items():
        targets = find_resource_refs(resource.get("Properties")) | set(_depends_on(resource))
        graph[logical_id] = {target for target in targets if target in resources and target != logical_id}
    return graph


def _templates(ctx: PostSynthContext) -> list[dict[str, Any]]:
    output = ctx.outputs.get(BACKEND)
    if output is None:
        return []
    documents = [output] if isinstance(output, str) else [output.primary, *output.files.values()]
    return [template for template in map(parse_template, documents) if template and template.get("Resources")]


def check_circular_references(ctx: PostSynthContext) -> list[Diagnostic]:
    diagnostics = []
    for template in _templates(ctx):
        for cycle in detect_cycles(reference_graph(template)):
            chain = " -> ".join([*cycle, cycle[0]])
            diagnostics.append(
                Diagnostic(
                    "TPL001",
                    Severity.ERROR,
                    f"Circular resource dependency: {chain}",
                    entity=cycle[0],
                    backend=BACKEND,
                )
            )
    return diagnostics


def check_unknown_references(ctx: PostSynthContext) -> list[Diagnostic]:
    diagnostics = []
    for template in _templates(ctx):
        known = set(template.get("Resources") or {}) | set(template.get("Parameters") or {})
        for logical_id, resource in template["Resources"].items():
            for target in sorted(find_resource_refs(resource.get("Properties")) - known):
                diagnostics.append(
                    Diagnostic(
                        "TPL002",
                        Severity.WARNING,
                        f'Resource "{logical_id}" references "{target}", which is not defined in the template',
                        entity=logical_id,
                        backend=BACKEND,
                    )
                )
    return diagnostics


circular_references = PostSynthCheck(
    "TPL001",
    "Circular resource dependency in the rendered template",
    check_circular_references,
)

unknown_references = PostSynthCheck(
    "TPL002",
    "Reference to a resource or parameter the template does not define",
    check_unknown_references,
)

TEMPLATE_CHECKS = [circular_references, unknown_references]


__all__ = [
    "TEMPLATE_CHECKS",
    "check_circular_references",
    "check_unknown_references",
    "circular_references",
    "find_resource_refs",
    "parse_template",
    "reference_graph",
    "unknown_references",
]
