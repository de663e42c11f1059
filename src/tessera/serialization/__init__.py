"""Serialization: the shared value walker and the backend serializer contract."""

from tessera.serialization.serializer import Serializer, SerializerResult, normalize_result
from tessera.serialization.walker import SerializerVisitor, walk_value

__all__ = ["Serializer", "SerializerResult", "SerializerVisitor", "normalize_result", "walk_value"]
