"""Tests for the AST declaration binder."""

from __future__ import annotations

import textwrap

import pytest

from jsdocmd.binders import AstDeclarationBinder, BindResult, extract_signature
from jsdocmd.models import (
    KIND_BLOCK,
    KIND_FILE,
    MALFORMED_TAG_HEADER,
    UNSUPPORTED_DECLARATION_SHAPE,
    ParamItem,
)
from jsdocmd.parsing.source import SourceParser


def _bind(source: str, path: str = "pkg/index.js") -> BindResult:
    parsed = SourceParser().parse(textwrap.dedent(source).lstrip("\n"), path)
    assert parsed is not None
    return AstDeclarationBinder().bind(parsed)


def test_binds_comment_to_exported_function() -> None:
    result = _bind(
        """
        /**
         * Adds two numbers.
         * @param {number} a first
         * @param {number} b second
         * @returns {number} sum
         */
        export function add(a, b) { return a + b; }
        """
    )

    assert result.diagnostics == []
    [record] = result.records
    assert record.kind == KIND_BLOCK
    assert record.name == "add"
    assert record.desc == "Adds two numbers."
    assert record.params == [
        ParamItem(name="a", type="number", desc="first"),
        ParamItem(name="b", type="number", desc="second"),
    ]
    assert record.returns == ParamItem(type="number", desc="sum")


def test_type_annotations_seed_params_and_returns() -> None:
    result = _bind(
        """
        /**
         * @param {string} x the value
         */
        export function f(x: number, y?: string, z = 3, ...rest: boolean[]): Promise<void> {}
        """,
        path="pkg/f.ts",
    )

    [record] = result.records
    assert record.params == [
        ParamItem(name="x", type="number", desc="the value"),
        ParamItem(name="y", type="string", optional=True),
        ParamItem(name="z", optional=True, default="3"),
        ParamItem(name="rest", type="boolean[]"),
    ]
    assert record.returns == ParamItem(type="Promise<void>")


def test_destructured_parameters_skip_only_that_declaration() -> None:
    result = _bind(
        """
        /** Skipped. */
        export function g({ a }) {}

        /** Kept. */
        export function h(b) {}
        """
    )

    assert [record.name for record in result.records] == ["h"]
    [diagnostic] = result.diagnostics
    assert diagnostic.kind == UNSUPPORTED_DECLARATION_SHAPE
    assert diagnostic.line == 2
    assert "object_pattern" in diagnostic.message


def test_variable_declarations_bind_their_name() -> None:
    result = _bind(
        """
        /** The answer. */
        export const answer = 42;

        /** A pair. */
        let first = 1, second = 2;
        """
    )

    assert [(record.name, record.desc) for record in result.records] == [
        ("answer", "The answer."),
        ("", "A pair."),
    ]
    assert result.records[0].params == []


def test_default_exports_are_unwrapped() -> None:
    result = _bind(
        """
        /** Widget. */
        export default class Widget {}
        """
    )
    assert [record.name for record in result.records] == ["Widget"]

    result = _bind(
        """
        /** Anonymous. */
        export default function (a) {}
        """
    )
    [record] = result.records
    assert record.name == ""
    assert record.params == [ParamItem(name="a")]


def test_export_wrapper_comments_come_first() -> None:
    result = _bind(
        """
        /** One. */
        export /** Two. */ function f() {}
        """
    )

    assert [record.desc for record in result.records] == ["One.", "Two."]


def test_file_comment_is_seeded_with_file_name() -> None:
    result = _bind(
        """
        /**
         * @file
         * @alias Utilities
         * Helpers.
         */
        export function x(a) {}
        """,
        path="pkg/utils.js",
    )

    [record] = result.records
    assert record.kind == KIND_FILE
    assert record.name == "utils"
    assert record.alias == "Utilities"
    assert record.params == []


def test_trailing_comments_only_count_as_file_docs() -> None:
    result = _bind(
        """
        export function a() {}
        /** Not a file doc. */
        """
    )
    assert result.records == []

    result = _bind(
        """
        export function a() {}
        /** @file Trailing file doc. */
        """
    )
    [record] = result.records
    assert record.kind == KIND_FILE
    assert record.name == "index"
    assert record.desc == "Trailing file doc."


def test_comment_only_file_uses_base_name() -> None:
    result = _bind("/** Just documentation. */\n", path="pkg/notes.js")

    [record] = result.records
    assert record.name == "notes"
    assert record.desc == "Just documentation."


def test_malformed_header_drops_only_that_comment() -> None:
    result = _bind(
        """
        /** @param {number a broken */
        export function first(a) {}

        /** @param {number} b fine */
        export function second(b) {}
        """
    )

    assert [record.name for record in result.records] == ["second"]
    [diagnostic] = result.diagnostics
    assert diagnostic.kind == MALFORMED_TAG_HEADER
    assert diagnostic.line == 1
    assert "Invalid @param" in diagnostic.message


def test_non_doc_comments_are_not_bound() -> None:
    result = _bind(
        """
        // just a note
        /* not a doc block */
        export function f() {}
        """
    )
    assert result.records == []


def test_ambient_function_signature() -> None:
    result = _bind(
        """
        /** Declared elsewhere. */
        declare function load(path: string): Buffer;
        """,
        path="pkg/types.ts",
    )

    [record] = result.records
    assert record.name == "load"
    assert record.params == [ParamItem(name="path", type="string")]
    assert record.returns == ParamItem(type="Buffer")


@pytest.mark.parametrize(
    ("source", "reason"),
    [
        ("function f([a, b]) {}\n", "array_pattern"),
        ("function f({ a } = {}) {}\n", "object_pattern"),
    ],
)
def test_extract_signature_reports_skip_reason(source: str, reason: str) -> None:
    parsed = SourceParser().parse(source, "pkg/a.js")
    assert parsed is not None

    outcome = extract_signature(parsed.statements[0].node, parsed)

    assert outcome.signature is None
    assert outcome.skip_reason is not None
    assert reason in outcome.skip_reason
