"""Defaults for scanning and npm access."""

from __future__ import annotations

import os

SOURCE_DIR = "src"
CONFIG_FILENAME = ".depsweep.toml"
MANIFEST_FILENAME = "package.json"

# Typed and untyped variants of the same module dialect
SUPPORTED_EXTENSIONS = (".ts", ".js")

# Dependency cache and build output
SKIP_DIRS = frozenset({"node_modules", "dist"})

NPM_BIN = os.environ.get("DEPSWEEP_NPM", "npm")
NPM_TIMEOUT = float(os.environ.get("DEPSWEEP_NPM_TIMEOUT", "120"))
