"""npm access for size estimates, vulnerability audits and uninstalls.

Process execution goes through a :data:`CommandRunner`, a plain callable the
caller can replace.  The default runner shells out with ``subprocess.run``;
tests pass a fake that returns canned output.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from . import config
from .exceptions import NpmError
from .models import AuditFinding

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str = ""


CommandRunner = Callable[[Sequence[str], Path, float], CommandResult]


def subprocess_runner(args: Sequence[str], cwd: Path, timeout: float) -> CommandResult:
    """Run *args* in *cwd* and capture its output."""
    try:
        proc = subprocess.run(
            list(args),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise NpmError(f"Executable not found: {args[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise NpmError(f"'{' '.join(args)}' timed out after {timeout:.0f}s") from exc
    return CommandResult(proc.returncode, proc.stdout, proc.stderr)


def _load_json(text: str, what: str) -> Any:
    if not text.strip():
        raise NpmError(f"{what} produced no output")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise NpmError(f"{what} returned invalid JSON: {exc}") from exc


def _fix_suggestion(fix: Any) -> Optional[str]:
    if fix is True:
        return "Run `npm audit fix`"
    if isinstance(fix, dict) and fix.get("name"):
        text = f"Upgrade {fix['name']} to {fix.get('version', 'latest')}"
        if fix.get("isSemVerMajor"):
            text += " (breaking change)"
        return text
    return None


def parse_audit_report(data: Dict[str, Any]) -> Dict[str, AuditFinding]:
    """Turn ``npm audit --json`` output into per-package findings.

    Handles both the legacy ``advisories`` layout (npm <= 6) and the
    ``vulnerabilities`` layout of npm 7+.
    """
    findings: Dict[str, AuditFinding] = {}

    for advisory in (data.get("advisories") or {}).values():
        name = advisory.get("module_name")
        if not name:
            continue
        finding = findings.setdefault(name, AuditFinding())
        recommendation = advisory.get("recommendation")
        if recommendation and recommendation not in finding.suggestions:
            finding.suggestions.append(recommendation)

    for key, vuln in (data.get("vulnerabilities") or {}).items():
        name = vuln.get("name") or key
        finding = findings.setdefault(name, AuditFinding())
        suggestion = _fix_suggestion(vuln.get("fixAvailable"))
        if suggestion and suggestion not in finding.suggestions:
            finding.suggestions.append(suggestion)

    return findings


class NpmClient:
    """Runs npm commands inside one project directory."""

    def __init__(
        self,
        project_root: Path,
        runner: CommandRunner = subprocess_runner,
        npm_bin: str = config.NPM_BIN,
        timeout: float = config.NPM_TIMEOUT,
    ) -> None:
        self.project_root = project_root
        self.runner = runner
        self.npm_bin = npm_bin
        self.timeout = timeout

    def _run(self, *args: str) -> CommandResult:
        cmd = [self.npm_bin, *args]
        logger.debug("Running %s", " ".join(cmd))
        return self.runner(cmd, self.project_root, self.timeout)

    def package_size(self, name: str) -> float:
        """Return the packed size of *name* in KB."""
        result = self._run("pack", name, "--dry-run", "--json")
        if result.returncode != 0:
            raise NpmError(f"npm pack {name} failed: {result.stderr.strip()}")
        data = _load_json(result.stdout, f"npm pack {name}")
        try:
            return data[0]["size"] / 1024
        except (IndexError, KeyError, TypeError) as exc:
            raise NpmError(f"npm pack {name}: unexpected output") from exc

    def audit(self) -> Dict[str, AuditFinding]:
        """Run ``npm audit`` and return findings keyed by package name."""
        # npm audit exits non-zero when it finds vulnerabilities; the JSON
        # report on stdout is what matters.
        result = self._run("audit", "--json")
        data = _load_json(result.stdout, "npm audit")
        if not isinstance(data, dict):
            raise NpmError("npm audit: unexpected output")
        error = data.get("error")
        if error:
            summary = error.get("summary") if isinstance(error, dict) else error
            raise NpmError(f"npm audit failed: {summary}")
        findings = parse_audit_report(data)
        logger.info("npm audit reported %d vulnerable package(s)", len(findings))
        return findings

    def uninstall(self, name: str) -> None:
        """Remove *name* from the project."""
        result = self._run("uninstall", name)
        if result.returncode != 0:
            raise NpmError(f"npm uninstall {name} failed: {result.stderr.strip()}")
