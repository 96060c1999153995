"""Data models shared by the manifest, npm and report layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Dependency:
    name: str
    version: str
    used: bool = False
    size_kb: Optional[float] = None
    vulnerable: bool = False
    suggestions: List[str] = field(default_factory=list)


@dataclass
class AuditFinding:
    vulnerable: bool = True
    suggestions: List[str] = field(default_factory=list)
