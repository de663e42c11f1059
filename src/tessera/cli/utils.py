"""
CLI utility helpers: output formatting and writing build artifacts.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tessera.build.pipeline import BuildResult
from tessera.core.errors import categorize_error
from tessera.core.logging import configure_logging
from tessera.core.settings import get_settings
from tessera.serialization.serializer import Serializer
from tessera.validation import Diagnostic, Severity

console = Console()
err_console = Console(stderr=True)

MANIFEST_FILENAME = "manifest.json"

_SEVERITY_STYLE = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "dim",
}


def setup_logging(log_level: str | None = None) -> None:
    """Configure logging from settings, with an optional level override."""
    settings = get_settings()
    configure_logging(
        level=(log_level or settings.log_level).upper(),
        json_format=settings.log_format == "json",
    )


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: Sequence[Mapping[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(str(v) for v in row.values()))
    console.print(table)


def print_errors(errors: Iterable[Exception]) -> None:
    for error in errors:
        code = type(error).__name__
        category = categorize_error(error).value
        err_console.print(f"[bold red]Error[/bold red] {escape(f'[{category}]')} ({code}): {error}")


def print_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        style = _SEVERITY_STYLE.get(diagnostic.severity, "")
        where = f" [{diagnostic.entity}]" if diagnostic.entity else ""
        err_console.print(
            f"[{style}]{diagnostic.severity.value}[/{style}] {diagnostic.check_id}{where}: {diagnostic.message}"
        )


def fail(message: str) -> NoReturn:
    """Print *message* as an error and exit with status 1."""
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=1)


# ── Artifacts ────────────────────────────────────────────────────────────


def write_outputs(result: BuildResult, serializers: Sequence[Serializer], output_dir: Path) -> list[Path]:
    """Write every backend's documents under ``output_dir/<backend>/`` plus the manifest.

    Returns the written paths.
    """
    by_name = {serializer.name: serializer for serializer in serializers}
    written: list[Path] = []
    for backend, serialized in result.outputs.items():
        backend_dir = output_dir / backend
        backend_dir.mkdir(parents=True, exist_ok=True)
        primary_name = by_name[backend].primary_filename if backend in by_name else Serializer.primary_filename
        for filename, content in serialized.documents().items():
            target = backend_dir / (filename or primary_name)
            target.write_text(content, encoding="utf-8")
            written.append(target)

    output_dir.mkdir(parents=True, exist_ok=True)
    manifest = output_dir / MANIFEST_FILENAME
    manifest.write_text(json.dumps(result.manifest.to_dict(), indent=2), encoding="utf-8")
    written.append(manifest)
    return written
