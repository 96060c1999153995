"""Tests for the Tree-sitter specifier extractor."""

from pathlib import Path

import pytest

from depsweep.exceptions import ParseError
from depsweep.parser import (
    NodeKind,
    SpecifierExtractor,
    classify,
    dialect_for_path,
    extract_specifiers,
)


@pytest.fixture(scope="module")
def extractor() -> SpecifierExtractor:
    return SpecifierExtractor()


def test_default_import(extractor):
    assert extractor.extract('import x from "left-pad";') == {"left-pad"}


def test_side_effect_and_namespace_imports(extractor):
    code = '''
import "reflect-metadata";
import * as path from "path";
import { a, b as c } from "@scope/pkg/sub";
'''
    assert extractor.extract(code) == {"reflect-metadata", "path", "@scope/pkg/sub"}


def test_type_only_import(extractor):
    code = 'import type { Request } from "express";\nlet r: Request | null = null;\n'
    assert extractor.extract(code) == {"express"}


def test_import_equals_require(extractor):
    assert extractor.extract('import fs = require("fs-extra");') == {"fs-extra"}


def test_require_call(extractor):
    code = 'const core = require("@babel/core");'
    assert extractor.extract(code, "javascript") == {"@babel/core"}


def test_require_nested_inside_function(extractor):
    code = '''
function load() {
  if (process.env.DEBUG) {
    return require("debug")("app");
  }
  return null;
}
'''
    assert extractor.extract(code, "javascript") == {"debug"}


def test_mixed_import_and_require(extractor):
    code = '''
import React from "react";
const fs = require("fs");
'''
    assert extractor.extract(code) == {"react", "fs"}


def test_non_literal_require_is_skipped(extractor):
    code = '''
const name = "chalk";
const a = require(name);
const b = require(`lodash`);
const c = require("left" + "-pad");
const d = require();
'''
    assert extractor.extract(code, "javascript") == set()


def test_require_with_comment_argument(extractor):
    assert extractor.extract('require(/* why */ "uuid");', "javascript") == {"uuid"}


def test_member_require_is_not_a_require_call(extractor):
    code = 'const x = module.require("not-me");'
    assert extractor.extract(code, "javascript") == set()


def test_reexports(extractor):
    code = '''
export * from "rxjs";
export { map } from "rxjs/operators";
export const local = 1;
'''
    assert extractor.extract(code) == {"rxjs", "rxjs/operators"}


def test_dynamic_import_literal(extractor):
    code = 'async function f(n) { await import("dayjs"); await import(n); }'
    assert extractor.extract(code, "javascript") == {"dayjs"}


def test_duplicates_collapse(extractor):
    code = '''
import a from "lodash";
import b from "lodash";
const c = require("lodash");
'''
    assert extractor.extract(code) == {"lodash"}


def test_relative_specifiers_are_returned_raw(extractor):
    # The extractor reports what it sees; filtering happens in the scanner.
    assert extractor.extract('import u from "./util";') == {"./util"}


def test_jsx_in_javascript(extractor):
    code = '''
import React from "react";
export const App = () => <div className="app">hi</div>;
'''
    assert extractor.extract(code, "javascript") == {"react"}


def test_typescript_only_syntax(extractor):
    code = '''
import { Injectable } from "@nestjs/common";

interface Options { retries?: number }
enum Mode { Fast, Slow }

@Injectable()
class Service<T extends object> {
  constructor(private readonly opts: Options = {}) {}
  run(input: T): Promise<T> { return Promise.resolve(input as T); }
}

export { Service, Mode };
'''
    assert extractor.extract(code) == {"@nestjs/common"}


def test_syntax_error_raises_parse_error(extractor):
    code = 'import x from "ok";\n\nconst = ;\n'
    with pytest.raises(ParseError) as excinfo:
        extractor.extract(code, path="broken.ts")
    err = excinfo.value
    assert err.path == "broken.ts"
    assert err.line == 3
    assert "broken.ts:3" in str(err)


def test_unknown_dialect(extractor):
    with pytest.raises(ValueError):
        extractor.extract("let x = 1;", "coffeescript")


def test_extract_file_picks_grammar_from_suffix(extractor, temp_dir: Path):
    path = temp_dir / "view.js"
    path.write_text('const v = require("vue");\nexport default () => <p/>;\n')
    assert extractor.extract_file(path) == {"vue"}


def test_dialect_for_path():
    assert dialect_for_path(Path("a.ts")) == "typescript"
    assert dialect_for_path(Path("a.tsx")) == "tsx"
    assert dialect_for_path(Path("a.js")) == "javascript"
    assert dialect_for_path(Path("a.mjs")) == "javascript"


def test_classify_kinds(extractor):
    parser = extractor._parser_for("typescript")
    tree = parser.parse(b'import a from "a";\nrequire("b");\nfoo("c");\n')
    statements = tree.root_node.named_children
    assert classify(statements[0]) is NodeKind.STATIC_IMPORT
    # expression_statement -> call_expression
    assert classify(statements[1].named_children[0]) is NodeKind.REQUIRE_CALL
    assert classify(statements[2].named_children[0]) is NodeKind.OTHER


def test_module_level_helper():
    assert extract_specifiers('import x from "left-pad";') == {"left-pad"}


def test_escape_sequences_are_decoded(extractor):
    code = r'''
const a = require("\x61xios");
import b from "bignumber.js";
import c from "lo\u{64}ash/fp";
const d = require('it\'s');
'''
    assert extractor.extract(code) == {"axios", "bignumber.js", "lodash/fp", "it's"}


def test_escaped_require_in_javascript(extractor):
    assert extractor.extract(r'require("\x61");', "javascript") == {"a"}
    assert extractor.extract(r'import("b");', "javascript") == {"b"}
