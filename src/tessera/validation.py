"""
Non-blocking validation of entities and serialized output.

Two layers:

- **Entity rules** (:class:`ValidationRule`) look at one declared entity.
- **Post-synthesis checks** (:class:`PostSynthCheck`) look at the serialized
  documents of a finished build, e.g. to find circular references in a
  rendered template.

Neither layer raises. Every finding is a :class:`Diagnostic` returned to the
caller, who decides whether error-severity findings fail the build.

Manifesto:
    Validation should be:
    - **Data, not control flow:** Findings are returned, never thrown
    - **Isolated:** A crashing check becomes a finding, other checks still run
    - **Attributed:** Each finding names its check, entity and backend

Examples:
    >>> def no_empty(ctx):
    ...     return [Diagnostic("X001", Severity.WARNING, f"{name} is empty", entity=name)
    ...             for name, doc in ctx.primary_outputs().items() if doc == "{}"]
    >>> runner = PostSynthRunner().add(PostSynthCheck("X001", "no empty output", no_empty))
    >>> diagnostics = runner.run_all(build_result)
    >>> runner.has_errors()
    False

Tags:
    validation, diagnostics, post-synth, lint, tessera-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tessera.core.logging import get_logger

logger = get_logger(__name__)


class Severity(str, Enum):
    """Severity of a diagnostic finding."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Diagnostic:
    """One validation finding.

    Attributes:
        check_id: Id of the rule or check that produced it
        severity: ERROR, WARNING or INFO
        message: Human-readable explanation
        entity: Logical name of the entity concerned, if any
        backend: Backend id concerned, if any
    """

    check_id: str
    severity: Severity
    message: str
    entity: str | None = None
    backend: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "check_id": self.check_id,
            "severity": self.severity.value,
            "message": self.message,
        }
        if self.entity is not None:
            result["entity"] = self.entity
        if self.backend is not None:
            result["backend"] = self.backend
        return result


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(diagnostic.severity is Severity.ERROR for diagnostic in diagnostics)


# =============================================================================
# ENTITY RULES
# =============================================================================


@dataclass
class ValidationResult:
    valid: bool
    message: str | None = None
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationRule:
    """A named rule applied to one entity."""

    id: str
    description: str
    validate_fn: Callable[[Any], ValidationResult]

    def validate(self, entity: Any) -> ValidationResult:
        return self.validate_fn(entity)


def validate(entity: Any, rules: Iterable[ValidationRule]) -> list[ValidationResult]:
    """Apply every rule to *entity* and return one result per rule."""
    return [rule.validate(entity) for rule in rules]


# =============================================================================
# POST-SYNTHESIS CHECKS
# =============================================================================


@dataclass
class PostSynthContext:
    """What a post-synthesis check can see of a finished build.

    ``outputs`` maps backend id to its serialized result (a
    :class:`~tessera.serialization.SerializerResult`), ``entities`` is the
    build's entity namespace and ``build_result`` the full build result.
    """

    outputs: Mapping[str, Any]
    entities: Mapping[str, Any]
    build_result: Any = None

    def primary_outputs(self) -> dict[str, str]:
        """Primary document per backend."""
        return {
            backend: result if isinstance(result, str) else result.primary
            for backend, result in self.outputs.items()
        }


@dataclass
class PostSynthCheck:
    """A check over serialized build output."""

    id: str
    description: str
    check_fn: Callable[[PostSynthContext], list[Diagnostic]]

    def check(self, ctx: PostSynthContext) -> list[Diagnostic]:
        return self.check_fn(ctx)


def run_post_synth_checks(
    checks: Iterable[PostSynthCheck],
    build_result: Any,
    *,
    disabled: Iterable[str] = (),
) -> list[Diagnostic]:
    """Run *checks* over a build result and collect their diagnostics.

    A check that raises produces an error-severity diagnostic instead of
    propagating, so one broken check cannot hide the findings of the others.
    """
    skip = set(disabled)
    ctx = PostSynthContext(
        outputs=build_result.outputs,
        entities=build_result.entities,
        build_result=build_result,
    )
    diagnostics: list[Diagnostic] = []
    for check in checks:
        if check.id in skip:
            continue
        try:
            found = check.check(ctx)
        except Exception as exc:
            logger.exception("post_synth_check_failed", check_id=check.id)
            diagnostics.append(
                Diagnostic(check.id, Severity.ERROR, f"Check {check.id} failed: {type(exc).__name__}: {exc}")
            )
            continue
        diagnostics.extend(found)
    return diagnostics


class PostSynthRunner:
    """Fluent wrapper around :func:`run_post_synth_checks`."""

    def __init__(self) -> None:
        self.checks: list[PostSynthCheck] = []
        self.diagnostics: list[Diagnostic] = []

    def add(self, check: PostSynthCheck) -> PostSynthRunner:
        self.checks.append(check)
        return self

    def run_all(self, build_result: Any, *, disabled: Iterable[str] = ()) -> list[Diagnostic]:
        self.diagnostics = run_post_synth_checks(self.checks, build_result, disabled=disabled)
        return self.diagnostics

    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)


__all__ = [
    "Diagnostic",
    "PostSynthCheck",
    "PostSynthContext",
    "PostSynthRunner",
    "Severity",
    "ValidationResult",
    "ValidationRule",
    "has_errors",
    "run_post_synth_checks",
    "validate",
]
