"""Module-specifier extraction for JavaScript / TypeScript using Tree-sitter.

Each source file is parsed into a concrete syntax tree and walked in full,
depth-first and pre-order.  Every node is classified into a small, closed set
of :class:`NodeKind` variants; the variants that name a module contribute the
string literal they carry, everything else only contributes its children.

Recognised references:

- ``import x from "m"``, ``import "m"``, ``import type {T} from "m"``
- ``import x = require("m")`` (TypeScript)
- ``export * from "m"``, ``export {a} from "m"``
- ``require("m")``
- ``import("m")``

Only plain string literals count.  ``require(name)``, ``require(`m`)`` and
other computed specifiers are skipped without error.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Set

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser as TSParser

from .exceptions import ParseError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# File-extension <-> grammar mapping
# ---------------------------------------------------------------------------
LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

_GRAMMARS: Dict[str, Callable[[], Any]] = {
    "javascript": tree_sitter_javascript.language,
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}


def dialect_for_path(path: Path) -> str:
    """Return the grammar name used for *path* (TypeScript when unknown)."""
    return LANGUAGE_MAP.get(path.suffix.lower(), "typescript")


# ===================================================================
# Node classification
# ===================================================================

class NodeKind(Enum):
    """The node variants the extractor cares about."""

    STATIC_IMPORT = "static_import"
    RE_EXPORT = "re_export"
    REQUIRE_CALL = "require_call"
    DYNAMIC_IMPORT = "dynamic_import"
    OTHER = "other"


def classify(node: Any) -> NodeKind:
    """Map a tree-sitter node onto a :class:`NodeKind`."""
    if node.type == "import_statement":
        return NodeKind.STATIC_IMPORT
    if node.type == "export_statement":
        if node.child_by_field_name("source") is not None:
            return NodeKind.RE_EXPORT
        return NodeKind.OTHER
    if node.type == "call_expression":
        callee = node.child_by_field_name("function")
        if callee is None:
            return NodeKind.OTHER
        if callee.type == "identifier" and callee.text == b"require":
            return NodeKind.REQUIRE_CALL
        if callee.type == "import":
            return NodeKind.DYNAMIC_IMPORT
    return NodeKind.OTHER


_SIMPLE_ESCAPES: Dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}

_LINE_TERMINATORS = ("\n", "\r", "\u2028", "\u2029")


def _decode_escape(text: str) -> str:
    """Decode one JS escape sequence (``\\x61``, ``\\u{1F600}``, ``\\101``, ``\\n`` ...)."""
    body = text[1:]
    if body.startswith(_LINE_TERMINATORS):
        # Line continuation
        return ""
    try:
        if body.startswith("u{"):
            return chr(int(body[2:-1], 16))
        if body[:1] in ("x", "u") and len(body) > 1:
            return chr(int(body[1:], 16))
        if body.isdigit():
            return chr(int(body, 8))
    except ValueError:
        return body
    return _SIMPLE_ESCAPES.get(body, body)


def _string_value(node: Any) -> Optional[str]:
    """Return the decoded value of a string literal node, or None."""
    if node is None or node.type != "string":
        return None
    parts = []
    for child in node.named_children:
        text = child.text.decode("utf-8")
        if child.type == "escape_sequence":
            parts.append(_decode_escape(text))
        elif child.type == "string_fragment":
            parts.append(text)
    value = "".join(parts)
    return value or None


def _statement_source(node: Any) -> Optional[str]:
    source = node.child_by_field_name("source")
    if source is None:
        # import x = require("m")
        for child in node.named_children:
            if child.type == "import_require_clause":
                source = child.child_by_field_name("source")
                if source is None:
                    source = next(
                        (c for c in child.named_children if c.type == "string"), None
                    )
                break
    return _string_value(source)


def _first_literal_argument(node: Any) -> Optional[str]:
    args = node.child_by_field_name("arguments")
    # Tagged templates (require`m`) carry a template_string here
    if args is None or args.type != "arguments":
        return None
    for child in args.named_children:
        if child.type == "comment":
            continue
        return _string_value(child)
    return None


_SPECIFIER_READERS: Dict[NodeKind, Callable[[Any], Optional[str]]] = {
    NodeKind.STATIC_IMPORT: _statement_source,
    NodeKind.RE_EXPORT: _statement_source,
    NodeKind.REQUIRE_CALL: _first_literal_argument,
    NodeKind.DYNAMIC_IMPORT: _first_literal_argument,
}


def iter_nodes(root: Any) -> Iterator[Any]:
    """Yield every node under *root* (inclusive) in pre-order."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _first_error(root: Any) -> Optional[Any]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(
            reversed([c for c in node.children if c.has_error or c.is_missing])
        )
    return None


# ===================================================================
# Extractor
# ===================================================================

class SpecifierExtractor:
    """Extract raw module specifiers from JS / TS source text.

    Grammars are loaded lazily on first use and the resulting Tree-sitter
    parsers are cached per dialect, so one instance can be reused across a
    whole project scan.
    """

    def __init__(self) -> None:
        self._parsers: Dict[str, TSParser] = {}

    def _parser_for(self, dialect: str) -> TSParser:
        parser = self._parsers.get(dialect)
        if parser is None:
            grammar = _GRAMMARS.get(dialect)
            if grammar is None:
                raise ValueError(f"Unsupported dialect: {dialect!r}")
            parser = TSParser(Language(grammar()))
            self._parsers[dialect] = parser
            logger.debug("Loaded tree-sitter grammar for %s", dialect)
        return parser

    def extract(
        self,
        source: str,
        dialect: str = "typescript",
        path: Optional[str] = None,
    ) -> Set[str]:
        """Return the set of specifiers referenced in *source*.

        Raises:
            ParseError: if the text does not parse cleanly in *dialect*.
        """
        tree = self._parser_for(dialect).parse(source.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            bad = _first_error(root) or root
            row, column = bad.start_point[0], bad.start_point[1]
            what = f"missing {bad.type}" if bad.is_missing else "syntax error"
            raise ParseError(what, path=path, line=row + 1, column=column + 1)

        specifiers: Set[str] = set()
        for node in iter_nodes(root):
            kind = classify(node)
            if kind is NodeKind.OTHER:
                continue
            value = _SPECIFIER_READERS[kind](node)
            if value:
                specifiers.add(value)
        return specifiers

    def extract_file(self, file_path: Path) -> Set[str]:
        """Read *file_path* and extract its specifiers."""
        source = file_path.read_text(encoding="utf-8", errors="replace")
        return self.extract(source, dialect_for_path(file_path), path=str(file_path))


_default_extractor: Optional[SpecifierExtractor] = None


def extract_specifiers(source: str, dialect: str = "typescript") -> Set[str]:
    """Module-level convenience wrapper around a shared extractor."""
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = SpecifierExtractor()
    return _default_extractor.extract(source, dialect)
