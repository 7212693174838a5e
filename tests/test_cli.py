"""Tests for the command-line interface."""

import json
import runpy
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from azarchgen import __version__
from azarchgen.cli import cli

WRAPPER = Path(__file__).resolve().parent.parent / "archgen.py"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def record_file(tmp_path):
    path = tmp_path / "architecture.json"
    path.write_text(
        json.dumps(
            {
                "resources": [
                    {"type": "hubVnet", "name": "vnet-hub-weu"},
                    {"type": "vm", "name": "vm-app", "count": 2},
                ],
                "title": "CLI Test",
            }
        ),
        encoding="utf-8",
    )
    return path


def test_generate_writes_file(runner, record_file, tmp_path):
    """Test the generate command writes a draw.io document."""
    output = tmp_path / "diagram.drawio"
    result = runner.invoke(cli, ["generate", str(record_file), "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert "<mxfile" in output.read_text(encoding="utf-8")


def test_generate_from_stdin(runner, tmp_path):
    """Test reading the record from standard input."""
    output = tmp_path / "stdin"
    result = runner.invoke(
        cli,
        ["generate", "-", "--output", str(output), "--title", "Piped"],
        input=json.dumps({"resources": [{"type": "vm", "name": "vm-1"}]}),
    )

    assert result.exit_code == 0, result.output
    assert (tmp_path / "stdin.drawio").exists()


def test_generate_rejects_bad_extension(runner, record_file, tmp_path):
    """Test a wrong output extension exits with an error."""
    result = runner.invoke(cli, ["generate", str(record_file), "-o", str(tmp_path / "out.svg")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_generate_rejects_malformed_input(runner, tmp_path):
    """Test malformed input exits with an error."""
    bad = tmp_path / "bad.json"
    bad.write_text('{"connections": []}', encoding="utf-8")
    result = runner.invoke(cli, ["generate", str(bad), "-o", str(tmp_path / "x.drawio")])

    assert result.exit_code == 1
    assert not (tmp_path / "x.drawio").exists()


def test_generate_reports_warnings(runner, tmp_path):
    """Test warnings are printed without failing the command."""
    path = tmp_path / "warn.json"
    path.write_text(json.dumps({"resources": [{"type": "warpDrive", "name": "wd"}]}), encoding="utf-8")
    result = runner.invoke(cli, ["generate", str(path), "-o", str(tmp_path / "w.drawio")])

    assert result.exit_code == 0, result.output
    assert "unknown-resource-type" in result.output


def test_resolve_known_type(runner):
    """Test resolving an alias."""
    result = runner.invoke(cli, ["resolve", "kv"])

    assert result.exit_code == 0, result.output
    assert "keyVault" in result.output


def test_resolve_unknown_type(runner):
    """Test resolving an unknown type fails."""
    result = runner.invoke(cli, ["resolve", "flux-capacitor"])
    assert result.exit_code == 1


def test_list_types_by_category(runner):
    """Test listing catalog types of one category."""
    result = runner.invoke(cli, ["list-types", "--category", "databases"])

    assert result.exit_code == 0, result.output
    assert "cosmosDb" in result.output


def test_info(runner):
    """Test the info command lists connection styles."""
    result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0, result.output
    assert "peering" in result.output


def test_custom_catalog_option(runner, tmp_path):
    """Test the global --catalog option replaces the bundled catalog."""
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps({"types": {"widget": {"icon": "img/widget.svg"}}}), encoding="utf-8")
    result = runner.invoke(cli, ["--catalog", str(catalog), "resolve", "vm"])

    assert result.exit_code == 1


def test_wrapper_script_runs_cli(monkeypatch, capsys):
    """Test the checkout wrapper script dispatches to the CLI."""
    namespace = runpy.run_path(str(WRAPPER), run_name="archgen_wrapper")
    monkeypatch.setattr(sys, "argv", ["archgen.py", "--version"])

    with pytest.raises(SystemExit) as excinfo:
        namespace["run"]()

    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out
