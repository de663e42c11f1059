"""Tessera core -- errors, logging, settings and project configuration.

Architecture::

    errors.py      Structured error hierarchy (TesseraError and phase errors)
    logging.py     structlog configuration and context helpers
    settings.py    TESSERA_* runtime settings (pydantic-settings)
    config.py      tessera.toml / tessera.json project config
"""

from tessera.core.errors import (
    BackendNotFoundError,
    BuildError,
    CycleDetectedError,
    DanglingReferenceError,
    DiscoveryError,
    DuplicateEntityError,
    ErrorCategory,
    ErrorContext,
    InvalidCompositeError,
    LoadError,
    ResolutionError,
    SerializationError,
    TesseraError,
)
from tessera.core.logging import configure_logging, get_logger

__all__ = [
    "BackendNotFoundError",
    "BuildError",
    "CycleDetectedError",
    "DanglingReferenceError",
    "DiscoveryError",
    "DuplicateEntityError",
    "ErrorCategory",
    "ErrorContext",
    "InvalidCompositeError",
    "LoadError",
    "ResolutionError",
    "SerializationError",
    "TesseraError",
    "configure_logging",
    "get_logger",
]
