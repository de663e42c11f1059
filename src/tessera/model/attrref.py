"""Attribute references: lazy pointers to one output attribute of an entity."""

from __future__ import annotations

from typing import Any

from tessera.core.errors import SerializationError


class AttrRef:
    """A reference to attribute *attribute* of the entity with handle *parent_handle*.

    The reference stores the parent's handle and backend id only. It is
    inert until the resolver assigns the parent's logical name via
    :meth:`resolve`; before that, :meth:`to_json` raises.

    Example:
        >>> bucket = create_resource("template", "Storage::Bucket", {"arn": "Arn"})
        >>> bucket.arn.attribute
        'Arn'
        >>> bucket.arn.is_resolved
        False
    """

    __slots__ = ("parent_handle", "parent_backend", "attribute", "_logical_name")

    def __init__(self, parent_handle: int, parent_backend: str, attribute: str):
        self.parent_handle = parent_handle
        self.parent_backend = parent_backend
        self.attribute = attribute
        self._logical_name: str | None = None

    @property
    def logical_name(self) -> str | None:
        """Logical name of the parent entity, ``None`` until resolved."""
        return self._logical_name

    @property
    def is_resolved(self) -> bool:
        return self._logical_name is not None

    def resolve(self, logical_name: str) -> None:
        self._logical_name = logical_name

    def to_json(self) -> dict[str, Any]:
        """Backend-neutral serialized form.

        Raises:
            SerializationError: The reference has not been resolved yet.
        """
        if self._logical_name is None:
            raise SerializationError(
                f'Cannot serialize unresolved attribute reference "{self.attribute}": '
                "logical name of the parent entity has not been assigned"
            )
        return {"__attr_ref": {"entity": self._logical_name, "attribute": self.attribute}}

    def __repr__(self) -> str:
        target = self._logical_name or f"#{self.parent_handle}"
        return f"AttrRef({target}.{self.attribute})"


__all__ = ["AttrRef"]
