"""
Tests for the tessera CLI.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from tessera import __version__
from tessera.cli.app import app

runner = CliRunner()

STORAGE = {
    "cli_storage.py": """
        from tessera.backends.template import resource

        Bucket = resource("Storage::Bucket", {"arn": "Arn"})
        Function = resource("Compute::Function")

        logs = Bucket(bucket_name="logs")
        handler = Function(bucket=logs.arn)
    """,
}

CYCLE = {
    "cli_cycle.py": """
        from tessera.backends.template import resource

        Bucket = resource("Storage::Bucket", {"arn": "Arn"})

        a = Bucket()
        b = Bucket(partner=a.arn)
        a.props["partner"] = b.arn
    """,
}


class TestVersion:
    def test_version_flag(self):
        """--version prints the version and exits cleanly."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.stdout.startswith("tessera ")

    def test_no_args_shows_help(self):
        """Running without a command prints usage."""
        result = runner.invoke(app, [])
        assert "Usage" in result.output

    def test_package_version(self):
        """The package exposes a version string."""
        assert __version__.count(".") == 2


class TestBuildCommand:
    def test_writes_documents_and_manifest(self, project_dir, tmp_path):
        """The rendered template and the manifest land in the output directory."""
        root = project_dir(STORAGE)
        out = tmp_path / "out"
        result = runner.invoke(app, ["build", str(root), "--output", str(out)])

        assert result.exit_code == 0, result.output
        template = json.loads((out / "template" / "main.template.json").read_text())
        assert template["Resources"]["handler"]["Properties"] == {"Bucket": {"Fn::GetAtt": ["logs", "Arn"]}}
        manifest = json.loads((out / "manifest.json").read_text())
        assert manifest["deploy_order"] == ["template"]
        assert "2 entities from 1 units" in result.stdout

    def test_json_summary(self, project_dir, tmp_path):
        """--json prints a machine-readable summary."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["build", str(root), "-o", str(tmp_path / "out"), "--json"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["entities"] == 2
        assert payload["source_units"] == 1
        assert payload["backends"] == ["template"]
        assert payload["errors"] == []
        assert any(path.endswith("main.template.json") for path in payload["files"])

    def test_default_output_dir(self, project_dir):
        """Without --output the build writes under the project's dist directory."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["build", str(root), "-b", "template"])
        assert result.exit_code == 0, result.output
        assert (root / "dist" / "template" / "main.template.json").is_file()

    def test_cycle_fails(self, project_dir, tmp_path):
        """A dependency cycle fails the build without writing documents."""
        root = project_dir(CYCLE)
        out = tmp_path / "out"
        result = runner.invoke(app, ["build", str(root), "-o", str(out), "--json"])
        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["errors"][0]["cycle"] == ["a", "b"]
        assert not out.exists()

    def test_broken_unit_still_builds_the_rest(self, project_dir, tmp_path):
        """A unit that fails to import is reported; the others are still rendered."""
        files = dict(STORAGE)
        files["cli_broken.py"] = "import tessera_missing_dependency\n"
        root = project_dir(files)
        out = tmp_path / "out"
        result = runner.invoke(app, ["build", str(root), "-o", str(out), "--json"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        payload = json.loads(result.stdout)
        assert [error["error_type"] for error in payload["errors"]] == ["LoadError"]
        assert payload["errors"][0]["file"].endswith("cli_broken.py")
        assert payload["entities"] == 2
        assert (out / "template" / "main.template.json").is_file()

    def test_broken_unit_reported_with_category(self, project_dir, tmp_path):
        """Rich error output names the error category."""
        files = dict(STORAGE)
        files["cli_broken.py"] = "import tessera_missing_dependency\n"
        root = project_dir(files)
        result = runner.invoke(app, ["build", str(root), "-o", str(tmp_path / "out")])
        assert result.exit_code == 1
        assert "[LOAD] (LoadError)" in result.output

    def test_unknown_backend(self, project_dir):
        """An unknown --backend exits with an error."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["build", str(root), "-b", "nope"])
        assert result.exit_code == 1
        assert "nope" in result.output

    def test_invalid_config(self, project_dir):
        """A malformed project config exits with an error."""
        files = dict(STORAGE)
        files["tessera.toml"] = 'backends = "template"\n'
        root = project_dir(files)
        result = runner.invoke(app, ["build", str(root)])
        assert result.exit_code == 1
        assert "InvalidConfigError" in result.output


class TestInspectCommands:
    def test_list_json(self, project_dir):
        """list --json reports every entity with its backend and kind."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["list", str(root), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["errors"] == []
        assert payload["entities"] == [
            {"name": "logs", "backend": "template", "type": "Storage::Bucket", "kind": "resource"},
            {"name": "handler", "backend": "template", "type": "Compute::Function", "kind": "resource"},
        ]

    def test_list_table(self, project_dir):
        """Without --json the entities are shown as a table."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["list", str(root)])
        assert result.exit_code == 0, result.output
        assert "Storage::Bucket" in result.stdout

    def test_graph_json(self, project_dir):
        """graph --json reports sorted dependency lists."""
        root = project_dir(STORAGE)
        result = runner.invoke(app, ["graph", str(root), "--json"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["dependencies"] == {"logs": [], "handler": ["logs"]}
        assert payload["cycles"] == []

    def test_graph_reports_cycles(self, project_dir):
        """Cycles are printed and fail the command."""
        root = project_dir(CYCLE)
        result = runner.invoke(app, ["graph", str(root)])
        assert result.exit_code == 1
        assert "Cycle" in result.stdout
        assert "a -> b -> a" in result.stdout

    @pytest.mark.parametrize("args", [["backends"], ["backends", "--json"]])
    def test_backends(self, args):
        """The built-in backend is listed."""
        result = runner.invoke(app, args)
        assert result.exit_code == 0
        assert "template" in result.stdout
