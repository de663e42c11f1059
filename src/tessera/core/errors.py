"""
Structured error types for the tessera compiler core.

Provides a typed hierarchy of errors carrying enough metadata (category,
source unit, entity, attribute, backend) for the build orchestrator to decide
whether a failure is collected and reported or whether it aborts the build.

The hierarchy mirrors the phases of a build. Loading a source unit can fail
without stopping the pass; resolution failures abort before graph building;
serialization failures propagate to the caller; dependency cycles are build
errors that stop serialization.

Manifesto:
    - **Typed Error Hierarchy:** One error type per phase of the pipeline
    - **Explicit Fatality:** Each error knows whether it aborts a build
    - **Rich Context:** Errors carry the unit, entity and attribute involved
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                        TesseraError                              │
        │              (category, fatal, context, cause)                   │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  DiscoveryError          SerializationError     BuildError       │
        │  (file, error_type)      (SERIALIZATION)        (entity_name)    │
        │       │                                              │           │
        │  LoadError                                    CycleDetectedError │
        │  ResolutionError                                                 │
        │    ├── DuplicateEntityError                                      │
        │    └── DanglingReferenceError                                    │
        │                                                                  │
        │  ConfigError             InvalidCompositeError                   │
        │    └── InvalidConfigError BackendNotFoundError                   │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = LoadError("src/bad.py", "invalid syntax")
    >>> error.error_type
    'load'
    >>> error.fatal
    False

    >>> CycleDetectedError(["a", "b"]).message
    'Circular dependency detected: a -> b -> a'

Tags:
    error-handling, exception-hierarchy, error-context, tessera-core

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and reporting.

    Categories follow the phases of a build: loading source units,
    resolving names and references, serializing, and building. CONFIG and
    VALIDATION cover project configuration and user declarations.
    """

    LOAD = "LOAD"
    RESOLUTION = "RESOLUTION"
    SERIALIZATION = "SERIALIZATION"
    BUILD = "BUILD"
    CONFIG = "CONFIG"
    VALIDATION = "VALIDATION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Fields
    ──────
    unit      : Source unit (file path) the error originated from
    entity    : Logical name of the entity involved
    attribute : Attribute name or property path involved
    backend   : Backend id (lexicon) involved
    metadata  : Free-form extra context
    """

    unit: str | None = None
    entity: str | None = None
    attribute: str | None = None
    backend: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["unit", "entity", "attribute", "backend"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TesseraError(Exception):
    """
    Base exception for all tessera errors.

    All TesseraError instances carry:
    - **category:** ErrorCategory for classification
    - **fatal:** Whether the error aborts the current build
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining

    Subclasses set ``default_category`` and ``default_fatal`` class
    attributes to provide sensible defaults for their phase.

    Examples:
        >>> error = TesseraError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = TesseraError("bad").with_context(entity="bucket")
        >>> error.context.entity
        'bucket'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_fatal: bool = True

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        fatal: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.fatal = fatal if fatal is not None else self.default_fatal
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TesseraError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SerializationError("unresolved").with_context(
                entity="bucket", backend="template"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "fatal": self.fatal,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# DISCOVERY ERRORS
# =============================================================================


DiscoveryErrorType = Literal["load", "resolution", "circular"]


class DiscoveryError(TesseraError):
    """
    Error raised while discovering entities in a project.

    Carries the source unit path and a coarse ``error_type`` so that
    reports can group failures without inspecting the class.
    """

    default_category = ErrorCategory.LOAD
    error_type: DiscoveryErrorType = "load"

    def __init__(
        self,
        file: str,
        message: str,
        *,
        error_type: DiscoveryErrorType | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.file = file
        if error_type is not None:
            self.error_type = error_type
        if file:
            self.context.unit = file

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["file"] = self.file
        result["type"] = self.error_type
        return result


class LoadError(DiscoveryError):
    """A source unit failed to load (syntax error, import failure, ...).

    Never fatal to the discovery pass.
    """

    default_category = ErrorCategory.LOAD
    default_fatal = False
    error_type: DiscoveryErrorType = "load"


class ResolutionError(DiscoveryError):
    """Names or references in the entity namespace could not be resolved."""

    default_category = ErrorCategory.RESOLUTION
    error_type: DiscoveryErrorType = "resolution"


class DuplicateEntityError(ResolutionError):
    """Two different entities were exported under the same name."""

    def __init__(self, name: str, file: str, message: str | None = None):
        self.name = name
        super().__init__(
            file,
            message or f'Duplicate entity name "{name}" found in {file}',
        )
        self.context.entity = name


class DanglingReferenceError(ResolutionError):
    """An attribute reference points at an entity outside the namespace."""

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(
            "",
            message or f"Cannot resolve attribute reference at {path}: parent entity is not in the namespace",
        )
        entity, _, attribute = path.partition(".")
        self.context.entity = entity
        self.context.attribute = attribute or None


# =============================================================================
# SERIALIZATION ERRORS
# =============================================================================


class SerializationError(TesseraError):
    """A value could not be converted to its output form."""

    default_category = ErrorCategory.SERIALIZATION

    def __init__(self, message: str, *, entity: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if entity is not None:
            self.context.entity = entity


# =============================================================================
# BUILD ERRORS
# =============================================================================


class BuildError(TesseraError):
    """
    Build failure attributed to an entity.

    ``entity_name`` is empty when the failure concerns the build as a whole.
    """

    default_category = ErrorCategory.BUILD

    def __init__(self, entity_name: str, message: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.entity_name = entity_name
        if entity_name:
            self.context.entity = entity_name

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["entity_name"] = self.entity_name
        return result


class CycleDetectedError(BuildError):
    """The dependency graph contains a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        path = list(cycle)
        if path and (len(path) == 1 or path[0] != path[-1]):
            path.append(path[0])
        super().__init__(
            cycle[0] if cycle else "",
            f"Circular dependency detected: {' -> '.join(path)}",
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["cycle"] = self.cycle
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TesseraError):
    """Project or runtime configuration error."""

    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# DECLARATION ERRORS
# =============================================================================


class InvalidCompositeError(TesseraError):
    """A composite factory returned a member that is not an entity."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, composite: str, member: str, message: str | None = None):
        self.composite = composite
        self.member = member
        super().__init__(
            message
            or f'Composite "{composite}" member "{member}" is not an entity or composite',
        )


class BackendNotFoundError(ConfigError):
    """No serializer is registered under the requested backend name."""

    def __init__(self, name: str, available: list[str] | None = None):
        self.name = name
        self.available = available or []
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Backend not found: {name}{hint}")
        self.context.backend = name


# =============================================================================
# UTILITIES
# =============================================================================


def is_fatal(error: Exception) -> bool:
    """Check whether an error aborts the current build."""
    if isinstance(error, TesseraError):
        return error.fatal
    return True


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, TesseraError):
        return error.category
    if isinstance(error, (ImportError, SyntaxError)):
        return ErrorCategory.LOAD
    if isinstance(error, (TypeError, ValueError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "TesseraError",
    # Discovery
    "DiscoveryError",
    "DiscoveryErrorType",
    "LoadError",
    "ResolutionError",
    "DuplicateEntityError",
    "DanglingReferenceError",
    # Serialization / build
    "SerializationError",
    "BuildError",
    "CycleDetectedError",
    # Config
    "ConfigError",
    "InvalidConfigError",
    "BackendNotFoundError",
    # Declarations
    "InvalidCompositeError",
    # Utilities
    "is_fatal",
    "categorize_error",
]
