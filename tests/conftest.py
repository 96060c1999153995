"""Pytest configuration and fixtures for depsweep tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Sequence

import pytest

from depsweep.npm import CommandResult, NpmClient


class FakeRunner:
    """Stand-in for subprocess execution that records every command.

    ``responses`` maps the npm sub-command plus arguments (e.g.
    ``"pack left-pad --dry-run --json"``) to a CommandResult.
    """

    def __init__(self, responses: Dict[str, CommandResult] = None):
        self.responses = responses or {}
        self.calls: List[List[str]] = []

    def __call__(self, args: Sequence[str], cwd: Path, timeout: float) -> CommandResult:
        self.calls.append(list(args))
        key = " ".join(args[1:])
        return self.responses.get(key, CommandResult(0, "", ""))


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Path to the sample JS/TS project."""
    return Path(__file__).parent / "fixtures" / "js_project"


@pytest.fixture
def copied_project(temp_dir: Path, sample_project_path: Path) -> Path:
    """A writable copy of the sample project."""
    target = temp_dir / "project"
    shutil.copytree(sample_project_path, target)
    return target


@pytest.fixture
def make_project(temp_dir: Path) -> Callable[..., Path]:
    """Build a project tree from a ``{relative_path: content}`` mapping."""

    def _make(files: Dict[str, str], dependencies: Dict[str, str] = None) -> Path:
        root = temp_dir / "proj"
        root.mkdir(exist_ok=True)
        if dependencies is not None:
            (root / "package.json").write_text(
                json.dumps({"name": "proj", "dependencies": dependencies})
            )
        for rel, content in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return root

    return _make


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_npm(monkeypatch, fake_runner: FakeRunner) -> FakeRunner:
    """Route every NpmClient the CLI builds through ``fake_runner``."""

    def _client(project_root, **kwargs):
        kwargs["runner"] = fake_runner
        return NpmClient(project_root, **kwargs)

    monkeypatch.setattr("depsweep.cli.NpmClient", _client)
    return fake_runner


@pytest.fixture
def make_runner():
    """Factory for FakeRunner instances with canned responses."""
    return FakeRunner
