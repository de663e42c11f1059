"""
Project configuration loaded from ``tessera.toml`` (or ``tessera.json``).

Example ``tessera.toml``::

    backends = ["template"]
    source_dir = "src"

    [lint]
    extends = ["recommended"]

    [lint.rules]
    TPL001 = "warning"

The file is optional; a project without one builds every backend its
entities declare.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tessera.core.errors import InvalidConfigError
from tessera.core.logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAMES = ("tessera.toml", "tessera.json")


class LintConfig(BaseModel):
    """Post-synthesis check configuration."""

    model_config = ConfigDict(extra="allow")

    extends: list[str] = Field(default_factory=list)
    rules: dict[str, str] = Field(default_factory=dict)

    def is_disabled(self, check_id: str) -> bool:
        return self.rules.get(check_id) == "off"


class ProjectConfig(BaseModel):
    """Validated contents of a project config file."""

    model_config = ConfigDict(extra="allow")

    backends: list[str] = Field(default_factory=list)
    source_dir: str | None = None
    lint: LintConfig = Field(default_factory=LintConfig)


@dataclass
class ResolvedConfig:
    """A project config together with the file it came from (``None`` if defaulted)."""

    config: ProjectConfig
    path: Path | None = None


def _read_config_file(path: Path) -> dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".toml":
            return tomllib.loads(text)
        return json.loads(text)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise InvalidConfigError(
            str(path), None, f"Cannot parse {path.name}: {exc}"
        ) from exc


def load_project_config(project_dir: Path | str) -> ResolvedConfig:
    """Find and validate the config file in *project_dir*.

    Raises:
        InvalidConfigError: The file exists but cannot be parsed or validated.
    """
    directory = Path(project_dir)
    for filename in CONFIG_FILENAMES:
        path = directory / filename
        if not path.is_file():
            continue
        data = _read_config_file(path)
        if not isinstance(data, dict):
            raise InvalidConfigError(str(path), data, f"{filename} must contain a table/object")
        try:
            config = ProjectConfig.model_validate(data)
        except ValidationError as exc:
            first = exc.errors()[0]
            key = ".".join(str(part) for part in first["loc"]) or filename
            raise InvalidConfigError(key, first.get("input"), f"Invalid {filename}: {key}: {first['msg']}") from exc
        logger.debug("project_config_loaded", path=str(path), backends=config.backends)
        return ResolvedConfig(config=config, path=path)
    return ResolvedConfig(config=ProjectConfig())


__all__ = ["CONFIG_FILENAMES", "LintConfig", "ProjectConfig", "ResolvedConfig", "load_project_config"]
