"""
mmpp CLI - Entry point.

Commands:
- format: Parse an expression and print its canonical form
- check: Verify files are already in canonical form
- depth: Print the nesting depth of an expression
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import typer

from mmpp._version import get_version
from mmpp.core.errors import ConfigError, MetricParseError
from mmpp.core.ir.metrics import Metric
from mmpp.core.metric_lang import metric_depth, parse_metric, pretty_print
from mmpp.core.settings import MmppSettings, load_settings

logger = logging.getLogger(__name__)

STDIN = "-"


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        typer.echo(f"mmpp version {get_version()}")
        raise typer.Exit()


app = typer.Typer(
    help="mmpp – parse metric expressions and print them in canonical form",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to mmpp.toml (default: ./mmpp.toml if present)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """mmpp CLI main callback for global options."""
    try:
        settings = load_settings(config)
    except ConfigError as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=1)

    level = logging.DEBUG if verbose else settings.log_level_value
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ctx.obj = settings


def _read_input(file: str) -> tuple[str, str]:
    """Read the whole input, returning (text, source name)."""
    if file == STDIN:
        return sys.stdin.read(), "<stdin>"
    try:
        return Path(file).read_text(encoding="utf-8"), file
    except OSError as e:
        typer.echo(f"Error: cannot read {file}: {e.strerror or e}", err=True)
        raise typer.Exit(code=1)


def _parse_or_exit(text: str, source: str, settings: MmppSettings) -> Metric:
    try:
        return parse_metric(text, max_depth=settings.max_depth, source=source)
    except MetricParseError as e:
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command(name="format")
def format_command(
    ctx: typer.Context,
    file: str = typer.Argument(STDIN, help="Expression file, or '-' for stdin"),
) -> None:
    """
    Parse a metric expression and print it in canonical form.
    """
    settings: MmppSettings = ctx.obj
    text, source = _read_input(file)
    metric = _parse_or_exit(text, source, settings)
    typer.echo(pretty_print(metric))


@app.command(name="check")
def check_command(
    ctx: typer.Context,
    files: list[Path] = typer.Argument(..., help="Expression files to check"),
) -> None:
    """
    Check that files parse and are already in canonical form.

    Exits with status 1 if any file is not canonical or fails to parse.
    """
    settings: MmppSettings = ctx.obj
    failed = 0

    for path in files:
        try:
            text = path.read_text(encoding="utf-8")
            metric = parse_metric(text, max_depth=settings.max_depth, source=str(path))
        except OSError as e:
            typer.echo(f"ERROR: {path}: {e.strerror or e}", err=True)
            failed += 1
            continue
        except MetricParseError as e:
            typer.echo(f"ERROR: {path}: {e}", err=True)
            failed += 1
            continue

        content = text[:-1] if text.endswith("\n") else text
        if content == pretty_print(metric):
            typer.echo(f"OK: {path}")
        else:
            logger.debug("%s differs from its canonical rendering", path)
            typer.echo(f"NOT CANONICAL: {path}")
            failed += 1

    if failed:
        raise typer.Exit(code=1)


@app.command(name="depth")
def depth_command(
    ctx: typer.Context,
    file: str = typer.Argument(STDIN, help="Expression file, or '-' for stdin"),
) -> None:
    """
    Print the nesting depth of a metric expression (1 for a single leaf).
    """
    settings: MmppSettings = ctx.obj
    text, source = _read_input(file)
    metric = _parse_or_exit(text, source, settings)
    typer.echo(str(metric_depth(metric)))


def main(argv: list[str] | None = None) -> None:
    """Console script entry point."""
    app(args=argv)


if __name__ == "__main__":
    main(sys.argv[1:])
