"""Backend registry for registering and looking up serializers by backend id.

Manifesto:
    Backends are plugins. The build only knows them by the id their
    entities carry, so a central registry lets the CLI and callers look a
    serializer up by name without import-time coupling.

Tags:
    tessera-core, backends, registry, plugin-discovery

Doc-Types:
    api-reference
"""

from collections.abc import Callable
from importlib.metadata import entry_points

from tessera.core.errors import BackendNotFoundError
from tessera.core.logging import get_logger
from tessera.serialization.serializer import Serializer

logger = get_logger(__name__)

ENTRY_POINT_GROUP = "tessera.backends"

# Global backend registry
_registry: dict[str, type[Serializer]] = {}
_loaded: bool = False


def register_backend(name: str) -> Callable[[type[Serializer]], type[Serializer]]:
    """Decorator to register a serializer class under backend id *name*."""

    def decorator(cls: type[Serializer]) -> type[Serializer]:
        if name in _registry and _registry[name] is not cls:
            raise ValueError(f"Backend '{name}' is already registered")
        _registry[name] = cls
        logger.debug("backend_registered", name=name, cls=cls.__name__)
        return cls

    return decorator


def _ensure_loaded() -> None:
    global _loaded
    if not _loaded:
        _load_backends()
        _loaded = True


def get_backend(name: str) -> Serializer:
    """Return a new serializer instance for backend *name*.

    Raises:
        BackendNotFoundError: No serializer is registered under *name*.
    """
    _ensure_loaded()
    if name not in _registry:
        raise BackendNotFoundError(name, sorted(_registry))
    return _registry[name]()


def list_backends() -> list[str]:
    """List all registered backend ids."""
    _ensure_loaded()
    return sorted(_registry)


def clear_registry() -> None:
    """Clear registry (for testing)."""
    global _loaded
    _registry.clear()
    _loaded = False


def _load_backends() -> None:
    """Register the built-in backends and those installed as entry points.

    Third-party packages expose a serializer class under the
    ``tessera.backends`` entry point group; the entry point name is the
    backend id.
    """
    from tessera.backends.template import TemplateSerializer

    _registry.setdefault(TemplateSerializer.name, TemplateSerializer)

    for entry_point in entry_points(group=ENTRY_POINT_GROUP):
        if entry_point.name in _registry:
            continue
        cls = entry_point.load()
        _registry[entry_point.name] = cls
        logger.debug("backend_entry_point_loaded", name=entry_point.name, value=entry_point.value)

    logger.debug("backend_registry_loaded", registered=len(_registry))


__all__ = ["ENTRY_POINT_GROUP", "clear_registry", "get_backend", "list_backends", "register_backend"]
