"""
Root Typer application for the tessera CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from tessera import __version__
from tessera.cli.commands import backends_command, build_command, graph_command, list_command

app = Typer(
    name="tessera",
    help="Compile declarative infrastructure definitions into backend documents.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("tessera")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"tessera {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """Build, inspect and graph tessera projects."""


# ── Commands ─────────────────────────────────────────────────────────────

app.command("build")(build_command)
app.command("list")(list_command)
app.command("graph")(graph_command)
app.command("backends")(backends_command)
