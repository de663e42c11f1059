"""Tessera entity model.

Architecture::

    arena.py        Entity handles + handle-indexed EntityArena
    attrref.py      AttrRef (handle-based attribute reference)
    declarable.py   Declarable / Resource / Property / ChildProject + constructors
    intrinsic.py    Intrinsic base, pseudo-parameters, string interpolation
    composite.py    Composite definitions, instances, expansion
    outputs.py      BackendOutput (cross-backend outputs)
    kinds.py        ValueKind classification
"""

from tessera.model.arena import EntityArena, next_handle
from tessera.model.attrref import AttrRef
from tessera.model.composite import (
    Composite,
    CompositeInstance,
    CompositeRegistry,
    composite,
    expand_composite,
    propagate,
    with_defaults,
)
from tessera.model.declarable import (
    ChildProject,
    Declarable,
    EntityKind,
    Property,
    Resource,
    create_property,
    create_resource,
    property_type,
    resource_type,
)
from tessera.model.intrinsic import (
    Intrinsic,
    PseudoParameter,
    build_interpolated_string,
    create_pseudo_parameters,
    default_interpolation_serializer,
)
from tessera.model.kinds import ValueKind, classify
from tessera.model.outputs import BackendOutput, output

__all__ = [
    "AttrRef",
    "BackendOutput",
    "ChildProject",
    "Composite",
    "CompositeInstance",
    "CompositeRegistry",
    "Declarable",
    "EntityArena",
    "EntityKind",
    "Intrinsic",
    "Property",
    "PseudoParameter",
    "Resource",
    "ValueKind",
    "build_interpolated_string",
    "classify",
    "composite",
    "create_property",
    "create_pseudo_parameters",
    "create_resource",
    "default_interpolation_serializer",
    "expand_composite",
    "next_handle",
    "output",
    "propagate",
    "property_type",
    "resource_type",
    "with_defaults",
]
