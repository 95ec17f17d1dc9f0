"""Tests for CLI commands."""

from importlib.metadata import PackageNotFoundError
from pathlib import Path

import pytest
from typer.testing import CliRunner

from mmpp import _version
from mmpp.cli import app

MULTILINE = "avg(\n  group(\n    host(a, b),\n    host(c, d)\n  )\n)\n"


@pytest.fixture
def cli_runner():
    """Return a CLI test runner."""
    return CliRunner()


def test_format_from_stdin(cli_runner: CliRunner, clean_env: Path):
    """Canonical text followed by a newline, exit status 0."""
    result = cli_runner.invoke(app, ["format"], input="avg(group(host(a,b), host('c', \"d\")))")
    assert result.exit_code == 0
    assert result.stdout == MULTILINE


def test_format_inline(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["format", "-"], input="  avg( role('Blog:  db', loadavg5) )\n")
    assert result.exit_code == 0
    assert result.stdout == "avg(role(Blog:db, loadavg5))\n"


def test_format_file(cli_runner: CliRunner, clean_env: Path):
    source = clean_env / "expr.txt"
    source.write_text("diff(service(Blog, foo.bar), service(Blog, foo.baz))")
    result = cli_runner.invoke(app, ["format", str(source)])
    assert result.exit_code == 0
    assert result.stdout == "diff(\n  service(Blog, foo.bar),\n  service(Blog, foo.baz)\n)\n"


def test_format_syntax_error(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["format"], input="host(a)")
    assert result.exit_code == 1
    assert "Parse error: <stdin>:1:7" in result.output
    assert "host takes 2 arguments" in result.output


def test_format_shape_error(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["format"], input="scale(service(Blog, foo.bar), abc)")
    assert result.exit_code == 1
    assert "invalid factor: 'abc'" in result.output


def test_format_missing_file(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["format", str(clean_env / "missing.txt")])
    assert result.exit_code == 1
    assert "cannot read" in result.output


def test_check_canonical_files(cli_runner: CliRunner, clean_env: Path):
    good = clean_env / "good.txt"
    good.write_text(MULTILINE)
    inline = clean_env / "inline.txt"
    inline.write_text("host(a, b)")
    result = cli_runner.invoke(app, ["check", str(good), str(inline)])
    assert result.exit_code == 0
    assert f"OK: {good}" in result.stdout
    assert f"OK: {inline}" in result.stdout


def test_check_reports_non_canonical_and_invalid(cli_runner: CliRunner, clean_env: Path):
    messy = clean_env / "messy.txt"
    messy.write_text("avg(group(host(a,b), host(c,d)))\n")
    broken = clean_env / "broken.txt"
    broken.write_text("group(host(a, b)\n")
    result = cli_runner.invoke(app, ["check", str(messy), str(broken)])
    assert result.exit_code == 1
    assert f"NOT CANONICAL: {messy}" in result.output
    assert f"ERROR: {broken}" in result.output


def test_depth(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["depth"], input="avg(group(host(a,b), host(c,d)))")
    assert result.exit_code == 0
    assert result.stdout.strip() == "3"


def test_config_limits_depth(cli_runner: CliRunner, clean_env: Path):
    config = clean_env / "strict.toml"
    config.write_text("[parser]\nmax_depth = 2\n")
    result = cli_runner.invoke(app, ["--config", str(config), "format"], input="avg(avg(host(a, b)))")
    assert result.exit_code == 1
    assert "maximum depth of 2" in result.output


def test_config_from_environment(
    cli_runner: CliRunner, clean_env: Path, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("MMPP_MAX_DEPTH", "1")
    result = cli_runner.invoke(app, ["format"], input="avg(host(a, b))")
    assert result.exit_code == 1
    assert "maximum depth of 1" in result.output


def test_missing_config(cli_runner: CliRunner, clean_env: Path):
    result = cli_runner.invoke(app, ["--config", str(clean_env / "nope.toml"), "format"], input="")
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_version(cli_runner: CliRunner):
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("mmpp version ")


def test_version_without_distribution_metadata(monkeypatch: pytest.MonkeyPatch):
    def not_installed(name: str) -> str:
        raise PackageNotFoundError(name)

    monkeypatch.setattr(_version, "version", not_installed)
    assert _version.get_version() == "0.0.0"
