"""Exception types raised by depsweep."""

from __future__ import annotations

from typing import Optional


class DepsweepError(Exception):
    """Base class for all depsweep errors."""


class ParseError(DepsweepError):
    """Source text is not valid module syntax."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        self.path = path
        self.line = line
        self.column = column
        location = path or "<source>"
        if line is not None:
            location = f"{location}:{line}:{column or 0}"
        super().__init__(f"{location}: {message}")


class ManifestError(DepsweepError):
    """package.json is missing or unreadable."""


class NpmError(DepsweepError):
    """An npm command failed or produced unusable output."""
