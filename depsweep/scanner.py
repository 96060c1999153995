"""Project scanner: walk a source tree and collect the packages it uses."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, FrozenSet, Iterator, Optional, Sequence, Set

from . import config
from .exceptions import ParseError
from .parser import SpecifierExtractor

logger = logging.getLogger(__name__)


def is_package_specifier(specifier: str) -> bool:
    """Return False for relative and absolute paths (``./x``, ``../x``, ``/x``)."""
    return bool(specifier) and not specifier.startswith((".", "/"))


def normalize_package_name(specifier: str) -> str:
    """Reduce a specifier to its top-level package name.

    ``lodash/fp`` -> ``lodash``; ``@scope/pkg/sub`` -> ``@scope/pkg``.
    """
    parts = specifier.split("/")
    if parts[0].startswith("@"):
        return "/".join(parts[:2])
    return parts[0]


def iter_source_files(
    root: Path,
    extensions: Sequence[str] = config.SUPPORTED_EXTENSIONS,
    exclude_dirs: AbstractSet[str] = config.SKIP_DIRS,
) -> Iterator[Path]:
    """Yield source files under *root*, skipping excluded directory names.

    Directory errors are not suppressed: an unreadable directory raises.
    Symbolic links are never followed.
    """
    suffixes = tuple(extensions)

    def _walk(current: Path) -> Iterator[Path]:
        for entry in sorted(current.iterdir()):
            if entry.is_symlink():
                continue
            if entry.is_dir():
                if entry.name in exclude_dirs:
                    logger.debug("Skipping excluded directory %s", entry)
                    continue
                yield from _walk(entry)
            elif entry.is_file() and entry.name.endswith(suffixes):
                yield entry

    yield from _walk(root)


def scan_project(
    root_dir: Path,
    extensions: Sequence[str] = config.SUPPORTED_EXTENSIONS,
    exclude_dirs: AbstractSet[str] = config.SKIP_DIRS,
    skip_errors: bool = False,
    extractor: Optional[SpecifierExtractor] = None,
) -> FrozenSet[str]:
    """Return the set of package names referenced from files under *root_dir*.

    Args:
        root_dir: Directory to scan (typically ``<project>/src``).
        extensions: File-name suffixes treated as source files.
        exclude_dirs: Directory names skipped at any depth.
        skip_errors: If True, files that fail to parse are logged and
            skipped. By default the ParseError propagates and aborts the scan.
        extractor: Extractor to reuse; a fresh one is created when omitted.

    Raises:
        FileNotFoundError: *root_dir* does not exist.
        NotADirectoryError: *root_dir* is not a directory.
        ParseError: a source file is not valid syntax (unless *skip_errors*).
    """
    root = Path(root_dir)
    if not root.exists():
        raise FileNotFoundError(f"Source directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    extractor = extractor or SpecifierExtractor()
    used: Set[str] = set()
    scanned = 0

    for file_path in iter_source_files(root, extensions, exclude_dirs):
        try:
            specifiers = extractor.extract_file(file_path)
        except ParseError as exc:
            if not skip_errors:
                raise
            logger.warning("Skipping unparsable file %s", exc)
            continue
        scanned += 1
        logger.debug("%s: %d specifier(s)", file_path, len(specifiers))
        for specifier in specifiers:
            if is_package_specifier(specifier):
                used.add(normalize_package_name(specifier))

    logger.info("Scanned %d file(s), found %d package(s)", scanned, len(used))
    return frozenset(used)
