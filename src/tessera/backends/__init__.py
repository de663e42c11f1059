"""Backend registry and built-in backends."""

from tessera.backends.registry import clear_registry, get_backend, list_backends, register_backend

__all__ = ["clear_registry", "get_backend", "list_backends", "register_backend"]
