"""Binds doc comments to the top-level declarations they precede."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tree_sitter import Node

from ..logging import get_logger
from ..models import (
    KIND_FILE,
    MALFORMED_TAG_HEADER,
    UNSUPPORTED_DECLARATION_SHAPE,
    Diagnostic,
    DocRecord,
    ParamItem,
)
from ..parsing.source import Comment, ParsedSource, Statement
from ..parsing.tags import MalformedTagHeader, parse_comment
from .base import Binder, BindResult

_FUNCTION_TYPES = {
    "function_declaration",
    "generator_function_declaration",
    "function_signature",
    "function_expression",
    "function",
    "generator_function",
}
_VARIABLE_TYPES = {"lexical_declaration", "variable_declaration"}
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}
_NAMED_PATTERNS = {"identifier", "this"}

logger = get_logger("binders.declarations")


class UnsupportedDeclarationShape(ValueError):
    """Raised when a declaration's signature cannot be derived from the tree."""


@dataclass(frozen=True)
class SignatureOutcome:
    """Either the derived signature or the reason the declaration is skipped."""

    signature: Optional[DocRecord] = None
    skip_reason: Optional[str] = None


def extract_signature(node: Node, parsed: ParsedSource) -> SignatureOutcome:
    """Derive a seed DocRecord (name, params, returns) from a declaration node."""
    try:
        return SignatureOutcome(signature=_signature(node, parsed))
    except UnsupportedDeclarationShape as exc:
        return SignatureOutcome(skip_reason=str(exc))


class AstDeclarationBinder(Binder):
    """Uses the syntax tree to seed every doc comment with its declaration's signature."""

    def bind(self, parsed: ParsedSource) -> BindResult:
        result = BindResult()
        file_seed = DocRecord(name=Path(parsed.path).stem)

        for comment in parsed.inner_comments:
            self._collect(result, parsed, comment, file_seed, file_seed)

        for statement in parsed.statements:
            self._bind_statement(result, parsed, statement, file_seed)
        return result

    def _bind_statement(
        self,
        result: BindResult,
        parsed: ParsedSource,
        statement: Statement,
        file_seed: DocRecord,
    ) -> None:
        node, leading = _unwrap_export(statement, parsed)
        outcome = extract_signature(node, parsed)
        if outcome.signature is None:
            line = node.start_point[0] + 1
            logger.debug("Skipping declaration in %s:%d: %s", parsed.path, line, outcome.skip_reason)
            result.diagnostics.append(
                Diagnostic(
                    kind=UNSUPPORTED_DECLARATION_SHAPE,
                    path=parsed.path,
                    message=outcome.skip_reason or "unsupported declaration",
                    line=line,
                )
            )
        for comment in leading:
            if outcome.signature is None:
                self._collect(result, parsed, comment, file_seed, file_seed, file_only=True)
            else:
                self._collect(result, parsed, comment, outcome.signature, file_seed)
        for comment in statement.trailing_comments:
            self._collect(result, parsed, comment, file_seed, file_seed, file_only=True)

    @staticmethod
    def _collect(
        result: BindResult,
        parsed: ParsedSource,
        comment: Comment,
        seed: DocRecord,
        file_seed: DocRecord,
        *,
        file_only: bool = False,
    ) -> None:
        try:
            record = parse_comment(comment, seed)
            if record is not None and record.kind == KIND_FILE and seed is not file_seed:
                record = parse_comment(comment, file_seed)
        except MalformedTagHeader as exc:
            logger.warning("Dropping comment at %s:%d: %s", parsed.path, comment.line, exc)
            result.diagnostics.append(
                Diagnostic(
                    kind=MALFORMED_TAG_HEADER,
                    path=parsed.path,
                    message=str(exc),
                    line=comment.line,
                )
            )
            return
        if record is None:
            return
        if file_only and record.kind != KIND_FILE:
            return
        result.records.append(record)


def _unwrap_export(statement: Statement, parsed: ParsedSource) -> Tuple[Node, List[Comment]]:
    node = statement.node
    comments = list(statement.leading_comments)
    if node.type != "export_statement":
        return node, comments
    inner = node.child_by_field_name("declaration") or node.child_by_field_name("value")
    if inner is None:
        return node, comments
    comments.extend(
        parsed.comment(child)
        for child in node.children
        if child.type == "comment" and child.end_byte <= inner.start_byte
    )
    return inner, comments


def _signature(node: Node, parsed: ParsedSource) -> DocRecord:
    if node.type == "ambient_declaration":
        inner = next((c for c in node.named_children if c.type != "comment"), None)
        if inner is not None:
            return _signature(inner, parsed)

    if node.type in _FUNCTION_TYPES:
        name_node = node.child_by_field_name("name")
        parameters = node.child_by_field_name("parameters")
        params = []
        if parameters is not None:
            params = [
                _param_item(child, parsed)
                for child in parameters.named_children
                if child.type != "comment"
            ]
        return DocRecord(
            name=parsed.text(name_node) if name_node else "",
            params=params,
            returns=_return_item(node, parsed),
        )

    if node.type in _VARIABLE_TYPES:
        declarators = [c for c in node.named_children if c.type == "variable_declarator"]
        if len(declarators) == 1:
            name_node = declarators[0].child_by_field_name("name")
            if name_node is not None and name_node.type == "identifier":
                return DocRecord(name=parsed.text(name_node))
        return DocRecord()

    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return DocRecord(name=parsed.text(name_node))
    if node.type == "identifier":
        return DocRecord(name=parsed.text(node))
    return DocRecord()


def _param_item(node: Node, parsed: ParsedSource) -> ParamItem:
    line = node.start_point[0] + 1
    if node.type in _PARAMETER_TYPES:
        pattern = node.child_by_field_name("pattern")
        type_node = node.child_by_field_name("type")
        value = node.child_by_field_name("value")
    elif node.type == "assignment_pattern":
        pattern, type_node, value = node.child_by_field_name("left"), None, node.child_by_field_name("right")
    else:
        pattern, type_node, value = node, None, None

    if pattern is not None and pattern.type == "rest_pattern":
        pattern = next((c for c in pattern.named_children if c.type != "comment"), None)
        if value is not None:
            raise UnsupportedDeclarationShape(f"rest parameter with a default at line {line}")

    if pattern is None or pattern.type not in _NAMED_PATTERNS:
        shape = pattern.type if pattern is not None else node.type
        raise UnsupportedDeclarationShape(f"unsupported parameter shape {shape!r} at line {line}")

    return ParamItem(
        name=parsed.text(pattern),
        type=_annotation_text(type_node, parsed),
        optional=node.type == "optional_parameter" or value is not None,
        default=parsed.text(value) if value is not None else "",
    )


def _return_item(node: Node, parsed: ParsedSource) -> Optional[ParamItem]:
    return_type = node.child_by_field_name("return_type")
    if return_type is None:
        return None
    return ParamItem(type=_annotation_text(return_type, parsed))


def _annotation_text(node: Optional[Node], parsed: ParsedSource) -> str:
    if node is None:
        return ""
    return parsed.text(node).lstrip(":").strip()


__all__ = [
    "AstDeclarationBinder",
    "SignatureOutcome",
    "UnsupportedDeclarationShape",
    "extract_signature",
]
