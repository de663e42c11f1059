"""
Composites: named factories that expand into several member entities.

A composite exported as ``api`` with members ``role`` and ``func`` becomes
the entities ``api_role`` and ``api_func`` during discovery; no entity named
``api`` exists afterward. Members may themselves be composite instances,
which expand recursively (``api_db_table``).

Examples:
    >>> @composite("LambdaApi")
    ... def lambda_api(name, runtime="python3.12"):
    ...     role = Role(RoleName=f"{name}-role")
    ...     func = Function(FunctionName=name, Runtime=runtime, Role=role.arn)
    ...     return {"role": role, "func": func}
    >>> api = lambda_api("orders")
    >>> sorted(expand_composite("api", api))
    ['api_func', 'api_role']

Shared properties:
    :func:`propagate` attaches props merged into every expanded member.
    Member values win over shared scalars, lists are concatenated (shared
    first) and ``None`` values are dropped on both sides.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from tessera.core.errors import InvalidCompositeError
from tessera.model.declarable import Declarable


class CompositeRegistry:
    """Process-wide registry of composite definitions."""

    _definitions: ClassVar[dict[int, Composite]] = {}

    @classmethod
    def register(cls, definition: Composite) -> None:
        cls._definitions[id(definition)] = definition

    @classmethod
    def get_all(cls) -> list[Composite]:
        return list(cls._definitions.values())

    @classmethod
    def clear(cls) -> None:
        cls._definitions.clear()

    @classmethod
    def size(cls) -> int:
        return len(cls._definitions)


class CompositeInstance:
    """The result of calling a composite definition.

    Members are reachable as attributes (``api.role``) and through
    :attr:`members`.
    """

    def __init__(self, members: Mapping[str, Declarable | CompositeInstance], definition: Composite):
        self.members: dict[str, Declarable | CompositeInstance] = dict(members)
        self.definition = definition
        self.shared_props: dict[str, Any] | None = None
        self._shared_applied = False

    def __getattr__(self, name: str) -> Any:
        members = self.__dict__.get("members")
        if members is not None and name in members:
            return members[name]
        raise AttributeError(f"composite {self.__dict__.get('definition')!r} has no member {name!r}")

    def __repr__(self) -> str:
        return f"CompositeInstance({self.definition.name}, members={list(self.members)})"


class Composite:
    """A named composite definition wrapping a member factory.

    The factory returns a mapping of member name to entity (or nested
    composite instance). Any other member value raises
    :class:`InvalidCompositeError` when the composite is instantiated.
    """

    def __init__(
        self,
        factory: Callable[..., Mapping[str, Any]],
        name: str | None = None,
        *,
        register: bool = True,
    ):
        self.factory = factory
        self.name = name or getattr(factory, "__name__", "anonymous")
        if register:
            CompositeRegistry.register(self)

    def __call__(self, *args: Any, **kwargs: Any) -> CompositeInstance:
        members = self.factory(*args, **kwargs)
        for key, value in members.items():
            if not isinstance(value, (Declarable, CompositeInstance)):
                raise InvalidCompositeError(self.name, key)
        return CompositeInstance(members, self)

    def __repr__(self) -> str:
        return f"Composite({self.name!r})"


def composite(name: str | None = None) -> Callable[[Callable[..., Mapping[str, Any]]], Composite]:
    """Decorator form of :class:`Composite`."""

    def decorator(factory: Callable[..., Mapping[str, Any]]) -> Composite:
        return Composite(factory, name)

    return decorator


def with_defaults(definition: Composite, **defaults: Any) -> Composite:
    """Return a definition whose keyword arguments default to *defaults*."""

    def factory(*args: Any, **kwargs: Any) -> Mapping[str, Any]:
        return definition.factory(*args, **{**defaults, **kwargs})

    return Composite(factory, definition.name, register=False)


def propagate(instance: CompositeInstance, **shared: Any) -> CompositeInstance:
    """Attach props merged into every member when *instance* is expanded."""
    instance.shared_props = dict(shared)
    instance._shared_applied = False
    return instance


def _merge_shared(shared: Mapping[str, Any], existing: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: value for key, value in shared.items() if value is not None}
    for key, value in existing.items():
        if value is None:
            continue
        if isinstance(value, list) and isinstance(merged.get(key), list):
            merged[key] = [*merged[key], *value]
        else:
            merged[key] = value
    return merged


def expand_composite(prefix: str, instance: CompositeInstance) -> dict[str, Declarable]:
    """Expand *instance* into ``{prefix}_{member}`` entities, recursively."""
    result: dict[str, Declarable] = {}
    for member_name, member in instance.members.items():
        full_name = f"{prefix}_{member_name}"
        if isinstance(member, CompositeInstance):
            result.update(expand_composite(full_name, member))
        else:
            result[full_name] = member

    if instance.shared_props and not instance._shared_applied:
        for entity in result.values():
            entity.props = _merge_shared(instance.shared_props, entity.props)
        instance._shared_applied = True

    return result


__all__ = [
    "Composite",
    "CompositeInstance",
    "CompositeRegistry",
    "composite",
    "expand_composite",
    "propagate",
    "with_defaults",
]
