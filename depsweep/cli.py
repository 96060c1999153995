"""Typer-based CLI for depsweep."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config_manager import load_settings
from .exceptions import DepsweepError, NpmError
from .manifest import declared_dependencies
from .models import Dependency
from .npm import NpmClient
from .report import attach_audit, attach_sizes, build_table, mark_usage, unused
from .scanner import scan_project

logger = logging.getLogger(__name__)

console = Console()

app = typer.Typer(
    help="🧹 depsweep: find and remove npm dependencies your source never imports.",
    add_completion=False,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"depsweep v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    pkg_logger = logging.getLogger("depsweep")
    for handler in list(pkg_logger.handlers):
        if isinstance(handler, RichHandler):
            pkg_logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s"))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _clean(deps: List[Dependency], npm: NpmClient, yes: bool) -> None:
    to_remove = unused(deps)
    if not to_remove:
        typer.echo("No unused dependencies found.")
        return

    typer.echo("Unused dependencies:")
    for dep in to_remove:
        typer.echo(f" - {dep.name}")

    if not yes:
        if not typer.confirm(f"\nRemove {len(to_remove)} package(s)?", default=False):
            typer.echo("Nothing removed.")
            return

    for dep in to_remove:
        try:
            npm.uninstall(dep.name)
        except NpmError as exc:
            typer.echo(f"❌ {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"Removed {dep.name}")


@app.command()
def main(
    project: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, help="Project directory containing package.json."
    ),
    clean: bool = typer.Option(False, "--clean", help="Remove unused dependencies."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before removing."),
    analyze: bool = typer.Option(False, "--analyze", help="Show package sizes (npm pack)."),
    audit: bool = typer.Option(False, "--audit", help="Flag vulnerable packages (npm audit)."),
    suggest: bool = typer.Option(
        False, "--suggest", help="Show audit fix suggestions (runs the audit; --audit alone hides them)."
    ),
    source_dir: Optional[str] = typer.Option(
        None, "--source-dir", "-s", help="Source directory relative to the project (default: src)."
    ),
    skip_unparsable: bool = typer.Option(
        False, "--skip-unparsable", help="Warn about files that fail to parse instead of aborting."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Report which declared dependencies are used by the project's source."""
    _configure_logging(verbose)

    root = project.resolve()
    settings = load_settings(root)
    scan_root = root / (source_dir or settings.source_dir)

    try:
        deps = declared_dependencies(root)
        used = scan_project(
            scan_root,
            extensions=settings.extensions,
            exclude_dirs=settings.exclude_dirs,
            skip_errors=skip_unparsable,
        )
    except (DepsweepError, OSError) as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(code=1)

    mark_usage(deps, used)
    npm = NpmClient(root, npm_bin=settings.npm_bin, timeout=settings.npm_timeout)

    if clean:
        _clean(deps, npm, yes)
        return

    if not deps:
        typer.echo("No dependencies declared in package.json.")
        return

    if analyze:
        attach_sizes(deps, npm)
    if audit or suggest:
        try:
            findings = npm.audit()
        except NpmError as exc:
            logger.warning("Audit failed: %s", exc)
            findings = {}
        attach_audit(deps, findings)

    console.print(build_table(deps, analyze=analyze, audit=audit, suggest=suggest))


if __name__ == "__main__":
    app()
