"""
CLI: ``tessera build`` / ``list`` / ``graph`` / ``backends``.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.tree import Tree

from tessera.backends import get_backend, list_backends
from tessera.build.pipeline import build
from tessera.cli.utils import (
    console,
    fail,
    print_diagnostics,
    print_errors,
    print_json,
    print_table,
    setup_logging,
    write_outputs,
)
from tessera.core.config import load_project_config
from tessera.core.errors import TesseraError
from tessera.core.settings import get_settings
from tessera.discovery import DiscoveryResult, detect_cycles, discover
from tessera.model.declarable import Declarable
from tessera.serialization.serializer import Serializer
from tessera.validation import has_errors


def _serializers(backends: list[str] | None) -> list[Serializer]:
    names = backends or list_backends()
    try:
        return [get_backend(name) for name in names]
    except TesseraError as exc:
        fail(exc.message)


def _discover(path: Path) -> DiscoveryResult:
    try:
        config = load_project_config(path).config
    except TesseraError as exc:
        fail(exc.message)
    source_root = path / config.source_dir if config.source_dir else path
    return discover(source_root)


def build_command(
    path: Path = typer.Argument(Path("."), help="Project directory."),
    backend: list[str] | None = typer.Option(None, "--backend", "-b", help="Backend to emit (repeatable)."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory."),
    json_out: bool = typer.Option(False, "--json", help="Print the build summary as JSON."),
    log_level: str | None = typer.Option(None, "--log-level", help="Override TESSERA_LOG_LEVEL."),
) -> None:
    """Build the project at PATH and write the rendered documents."""
    setup_logging(log_level)
    serializers = _serializers(backend)

    try:
        result = build(path, serializers)
    except TesseraError as exc:
        fail(f"{type(exc).__name__}: {exc.message}")

    output_dir = output or (path / get_settings().output_dir)
    written = write_outputs(result, serializers, output_dir) if result.outputs else []

    if json_out:
        print_json(
            {
                **result.summary(),
                "files": [str(item) for item in written],
                "warnings": result.warnings,
                "errors": [error.to_dict() for error in result.errors],
                "diagnostics": [diagnostic.to_dict() for diagnostic in result.diagnostics],
                "manifest": result.manifest.to_dict(),
            }
        )
    else:
        for warning in result.warnings:
            console.print(f"[yellow]Warning[/yellow]: {warning}")
        print_errors(result.errors)
        print_diagnostics(result.diagnostics)
        for item in written:
            console.print(f"  [green]wrote[/green] {item}")
        console.print(
            f"[bold]{len(result.entities)}[/bold] entities from "
            f"[bold]{result.source_unit_count}[/bold] units → {', '.join(result.outputs) or 'no output'}"
        )

    if result.errors or has_errors(result.diagnostics):
        raise typer.Exit(code=1)


def list_command(
    path: Path = typer.Argument(Path("."), help="Project directory."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the entities declared in the project at PATH."""
    setup_logging()
    discovery = _discover(path)

    rows = []
    for name, entity in discovery.entities.items():
        if isinstance(entity, Declarable):
            rows.append(
                {"name": name, "backend": entity.backend, "type": entity.entity_type, "kind": entity.kind.value}
            )
        else:
            rows.append({"name": name, "backend": entity.source_backend, "type": "output", "kind": "output"})

    if json_out:
        print_json({"entities": rows, "errors": [error.to_dict() for error in discovery.errors]})
    else:
        print_table(rows, title="Entities")
        print_errors(discovery.errors)

    if discovery.errors:
        raise typer.Exit(code=1)


def graph_command(
    path: Path = typer.Argument(Path("."), help="Project directory."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show the dependency graph of the project at PATH."""
    setup_logging()
    discovery = _discover(path)
    cycles = detect_cycles(discovery.dependencies)

    if json_out:
        print_json(
            {
                "dependencies": {name: sorted(deps) for name, deps in discovery.dependencies.items()},
                "cycles": cycles,
                "errors": [error.to_dict() for error in discovery.errors],
            }
        )
    else:
        tree = Tree(f"[bold]{path}[/bold]")
        for name, deps in discovery.dependencies.items():
            node = tree.add(f"[cyan]{name}[/cyan]")
            for dep in sorted(deps):
                node.add(dep)
        console.print(tree)
        for cycle in cycles:
            console.print(f"[bold red]Cycle[/bold red]: {' -> '.join([*cycle, cycle[0]])}")
        print_errors(discovery.errors)

    if discovery.errors or cycles:
        raise typer.Exit(code=1)


def backends_command(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List the registered backends."""
    names = list_backends()
    if json_out:
        print_json(names)
        return
    print_table([{"backend": name, "serializer": type(get_backend(name)).__name__} for name in names], title="Backends")
