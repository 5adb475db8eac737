"""CLI commands for resolving paths, capturing snippets and driving builds."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .api import extract_snippet, resolve_path
from .bridge import AutomationUnavailable
from .config import DEFAULT_CONFIG_NAME, ConfigError, ProjectContext, load_context, load_factory
from .orchestrator import FAILED_TO_CONNECT, BuildOrchestrator, SessionStatus
from .tools.snippets import fence

APP_HELP = "buildscope CLI entry point."

app = typer.Typer(help=APP_HELP)

_CONFIG_OPTION = typer.Option(
    DEFAULT_CONFIG_NAME,
    "--config",
    "-c",
    help="Path to the buildscope configuration file.",
)


@app.callback()
def main(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Configure logging for every command."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _context(config: str) -> ProjectContext:
    try:
        return load_context(Path(config))
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error


@app.command()
def resolve(
    path: str = typer.Argument(..., help="File path or bare file name to resolve."),
    config: str = _CONFIG_OPTION,
) -> None:
    """Resolve a path against the project's search roots."""
    context = _context(config)
    result = resolve_path(path, context)
    if result.warning:
        typer.echo(result.warning)
    if not result.found:
        typer.echo(f"Not found: {path}")
        raise typer.Exit(code=1)
    typer.echo(f"{result.resolved} ({result.match_kind.value})")


@app.command()
def snippet(
    path: str = typer.Argument(..., help="File to capture."),
    start: Optional[int] = typer.Option(None, "--start", "-s", help="First line (1-indexed)."),
    end: Optional[int] = typer.Option(None, "--end", "-e", help="Last line (inclusive)."),
    entire_file: bool = typer.Option(False, "--entire-file", help="Capture the whole file."),
    config: str = _CONFIG_OPTION,
) -> None:
    """Print a fenced code snippet for a file or a line range."""
    context = _context(config)
    result = extract_snippet(path, start, end, entire_file, context)
    if result.warning:
        typer.echo(result.warning)
        typer.echo("")
    if not result.ok:
        typer.echo(result.text)
        raise typer.Exit(code=1)
    typer.echo(fence(result.language, result.text.rstrip("\n")))


@app.command()
def build(
    target: Optional[str] = typer.Argument(None, help="Project or workspace to build."),
    run: bool = typer.Option(False, "--run/--no-run", help="Launch instead of building."),
    config: str = _CONFIG_OPTION,
) -> None:
    """Build (or launch) a target through the configured automation bridge."""
    context = _context(config)
    if not context.bridge_spec:
        typer.echo("No automation bridge configured (automation.bridge).")
        raise typer.Exit(code=1)
    try:
        factory = load_factory(context.bridge_spec)
    except ConfigError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error

    try:
        bridge = factory()
    except AutomationUnavailable as error:
        typer.echo(f"{FAILED_TO_CONNECT}: {error}")
        raise typer.Exit(code=1) from error

    orchestrator = BuildOrchestrator(bridge, context)
    session = orchestrator.build_session(target, run=run)
    typer.echo(session.message)
    if session.status == SessionStatus.FAILED:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
