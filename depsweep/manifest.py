"""Read declared dependencies from a project's package.json."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from . import config
from .exceptions import ManifestError
from .models import Dependency

logger = logging.getLogger(__name__)


def load_manifest(project_root: Path) -> Dict[str, Any]:
    """Load and parse ``package.json`` from *project_root*."""
    manifest_path = project_root / config.MANIFEST_FILENAME
    if not manifest_path.is_file():
        raise ManifestError(f"No {config.MANIFEST_FILENAME} found in {project_root}")
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON in {manifest_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(f"{manifest_path} does not contain a JSON object")
    return data


def declared_dependencies(project_root: Path) -> List[Dependency]:
    """Return the runtime ``dependencies`` of the project, in manifest order.

    devDependencies, peerDependencies and optionalDependencies are ignored.
    """
    manifest = load_manifest(project_root)
    deps = manifest.get("dependencies") or {}
    if not isinstance(deps, dict):
        raise ManifestError("'dependencies' must be an object")
    logger.debug("Manifest declares %d dependencies", len(deps))
    return [Dependency(name=name, version=str(version)) for name, version in deps.items()]
