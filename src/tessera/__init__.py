"""
tessera: declarative infrastructure-as-code compiler core.

Users declare resources as plain Python values in source units. tessera
discovers them, names them after the bindings they are exported under,
resolves attribute references, orders them by dependency and hands them to
backend serializers.

Examples:
    >>> from tessera import build
    >>> from tessera.backends import get_backend
    >>> result = build("infra", [get_backend("template")])
    >>> result.ok
    True
"""

__version__ = "0.1.0"

from tessera.build import BuildResult, build
from tessera.discovery import DiscoveryResult, discover
from tessera.model import (
    AttrRef,
    ChildProject,
    Declarable,
    Property,
    Resource,
    composite,
    output,
    property_type,
    resource_type,
)

__all__ = [
    "AttrRef",
    "BuildResult",
    "ChildProject",
    "Declarable",
    "DiscoveryResult",
    "Property",
    "Resource",
    "__version__",
    "build",
    "composite",
    "discover",
    "output",
    "property_type",
    "resource_type",
]
