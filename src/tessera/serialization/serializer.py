"""Backend serializer contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tessera.model.declarable import Declarable
from tessera.model.outputs import OUTPUT_MARKER, BackendOutput

if TYPE_CHECKING:
    from tessera.validation import Diagnostic, PostSynthCheck


@dataclass
class SerializerResult:
    """Output documents of one backend: a primary document plus named extra files."""

    primary: str
    files: dict[str, str] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def documents(self) -> dict[str, str]:
        """All documents keyed by file name (the primary under ``""``)."""
        return {"": self.primary, **self.files}


class Serializer(ABC):
    """Base class for backend serializers.

    Subclasses set :attr:`name` (the backend id their entities carry).
    Writers store the primary document under :attr:`primary_filename` and
    extra files beside it.
    """

    name: str = ""
    primary_filename: str = "main.out"

    @abstractmethod
    def serialize(
        self,
        entities: Mapping[str, Declarable],
        outputs: Sequence[BackendOutput] = (),
        dependencies: Mapping[str, set[str]] | None = None,
    ) -> SerializerResult | str:
        """Render *entities* (in dependency order) and *outputs* to documents."""

    def serialize_cross_ref(self, output_name: str) -> Any:
        """Render a reference to the output *output_name* produced by another backend."""
        return {OUTPUT_MARKER: output_name}

    def post_synth_checks(self) -> list[PostSynthCheck]:
        """Checks to run over this backend's serialized documents."""
        return []


def normalize_result(result: SerializerResult | str) -> SerializerResult:
    if isinstance(result, SerializerResult):
        return result
    return SerializerResult(primary=result)


__all__ = ["Serializer", "SerializerResult", "normalize_result"]
