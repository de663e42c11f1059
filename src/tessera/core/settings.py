"""
Runtime settings for tessera.

Settings cover how a project tree is scanned (which files are source units,
which directories are skipped, which marker file bounds a project) and how
the tool logs. They are read from ``TESSERA_*`` environment variables and
``.env`` files via pydantic-settings. Per-project settings such as the
backends to build live in the project config (:mod:`tessera.core.config`).

Examples:
    >>> from tessera.core.settings import get_settings
    >>> settings = get_settings()
    >>> settings.boundary_marker
    '_.py'

Tags:
    settings, configuration, pydantic, environment, tessera-core

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TesseraSettings(BaseSettings):
    """Tessera runtime configuration.

    Fields
    ──────
    log_level       : Structlog log level
    log_format      : ``json`` or ``console``
    source_suffix   : File suffix of source units
    test_patterns   : Glob patterns of files never treated as source units
    excluded_dirs   : Directory names never descended into
    boundary_marker : File whose presence marks a project root
    output_dir      : Default directory for build output
    """

    model_config = SettingsConfigDict(
        env_prefix="TESSERA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="console")

    # ── Discovery ────────────────────────────────────────────────
    source_suffix: str = Field(default=".py")
    test_patterns: list[str] = Field(
        default=["test_*.py", "*_test.py", "conftest.py"],
    )
    excluded_dirs: list[str] = Field(
        default=[
            "__pycache__",
            ".venv",
            "venv",
            ".git",
            "node_modules",
            "site-packages",
            ".tox",
            "build",
            "dist",
        ],
    )
    boundary_marker: str = Field(default="_.py", description="Marks a project source root")

    # ── Output ───────────────────────────────────────────────────
    output_dir: str = Field(default="dist")

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError(f"log_format must be 'json' or 'console', got {value!r}")
        return value


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, TesseraSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TesseraSettings:
    """Load, validate, and cache a :class:`TesseraSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = TesseraSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = ["TesseraSettings", "get_settings", "clear_settings_cache"]
