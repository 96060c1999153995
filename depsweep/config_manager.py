"""Per-project configuration loaded from ``.depsweep.toml``.

Example file::

    [scan]
    source_dir = "lib"
    extensions = [".ts", ".js", ".tsx"]
    exclude_dirs = ["node_modules", "dist", "coverage"]

    [npm]
    bin = "pnpm"
    timeout = 60
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, List, Tuple

import toml

from . import config

logger = logging.getLogger(__name__)


@dataclass
class ScanSettings:
    source_dir: str = config.SOURCE_DIR
    extensions: Tuple[str, ...] = config.SUPPORTED_EXTENSIONS
    exclude_dirs: FrozenSet[str] = field(default_factory=lambda: config.SKIP_DIRS)
    npm_bin: str = config.NPM_BIN
    npm_timeout: float = config.NPM_TIMEOUT


def load_full_config(project_root: Path) -> Dict[str, Any]:
    """Load the entire TOML config (all sections), or {} when absent."""
    config_file = project_root / config.CONFIG_FILENAME
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable %s: %s", config_file, exc)
        return {}


def _normalize_ext(ext: str) -> str:
    return ext if ext.startswith(".") else "." + ext


def _section(full: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = full.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring [%s]: expected a table, got %r", name, section)
        return {}
    return section


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        raise TypeError(f"expected a list of strings, got {value!r}")
    return [str(item) for item in value]


def _apply(settings: ScanSettings, attr: str, key: str, raw: Any, convert: Callable[[Any], Any]) -> None:
    try:
        setattr(settings, attr, convert(raw))
    except (TypeError, ValueError) as exc:
        logger.warning("Ignoring invalid %s in %s: %s", key, config.CONFIG_FILENAME, exc)


def load_settings(project_root: Path) -> ScanSettings:
    """Merge ``[scan]`` and ``[npm]`` from the project's config over the defaults.

    Invalid values are logged and leave the corresponding default in place.
    """
    full = load_full_config(project_root)
    scan = _section(full, "scan")
    npm = _section(full, "npm")
    settings = ScanSettings()

    if "source_dir" in scan:
        _apply(settings, "source_dir", "scan.source_dir", scan["source_dir"], str)
    if "extensions" in scan:
        _apply(
            settings, "extensions", "scan.extensions", scan["extensions"],
            lambda v: tuple(_normalize_ext(e) for e in _string_list(v)),
        )
    if "exclude_dirs" in scan:
        _apply(
            settings, "exclude_dirs", "scan.exclude_dirs", scan["exclude_dirs"],
            lambda v: frozenset(_string_list(v)),
        )
    if "bin" in npm:
        _apply(settings, "npm_bin", "npm.bin", npm["bin"], str)
    if "timeout" in npm:
        _apply(settings, "npm_timeout", "npm.timeout", npm["timeout"], float)

    return settings
