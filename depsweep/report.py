"""Reconcile declared dependencies against scan results and render them."""

from __future__ import annotations

import logging
from typing import AbstractSet, Dict, List, Optional

from rich.table import Table

from .exceptions import NpmError
from .models import AuditFinding, Dependency
from .npm import NpmClient

logger = logging.getLogger(__name__)


def mark_usage(deps: List[Dependency], used: AbstractSet[str]) -> List[Dependency]:
    """Set ``used`` on each dependency from the scanned package set."""
    for dep in deps:
        dep.used = dep.name in used
    return deps


def unused(deps: List[Dependency]) -> List[Dependency]:
    return [d for d in deps if not d.used]


def attach_sizes(deps: List[Dependency], npm: NpmClient) -> None:
    """Best effort: a failed lookup leaves ``size_kb`` unset."""
    for dep in deps:
        try:
            dep.size_kb = npm.package_size(dep.name)
        except NpmError as exc:
            logger.warning("Could not estimate size of %s: %s", dep.name, exc)


def attach_audit(deps: List[Dependency], findings: Dict[str, AuditFinding]) -> None:
    for dep in deps:
        finding = findings.get(dep.name)
        if finding is not None:
            dep.vulnerable = finding.vulnerable
            dep.suggestions = list(finding.suggestions)


def build_table(
    deps: List[Dependency],
    analyze: bool = False,
    audit: bool = False,
    suggest: bool = False,
    title: Optional[str] = None,
) -> Table:
    """Render *deps* as a rich table; inactive columns show ``-``."""
    table = Table(title=title, show_lines=False)
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Used", justify="center")
    table.add_column("Size", justify="right")
    table.add_column("Vulnerable", justify="center")
    table.add_column("Suggestions")

    for dep in deps:
        used = "[green]✓[/green]" if dep.used else "[red]✗[/red]"
        size = f"{dep.size_kb:.1f} KB" if analyze and dep.size_kb else "-"
        if audit:
            vulnerable = "[yellow]⚠[/yellow]" if dep.vulnerable else "[green]✓[/green]"
        else:
            vulnerable = "-"
        if suggest and dep.suggestions:
            suggestions = " | ".join(dep.suggestions)
        else:
            suggestions = "-"
        table.add_row(dep.name, used, size, vulnerable, suggestions)

    return table
