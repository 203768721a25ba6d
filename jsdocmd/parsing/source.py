"""Tree-sitter powered parser for JavaScript and TypeScript sources."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from ..logging import get_logger
from ..models import SYNTAX_ERROR, Diagnostic

_LANGUAGES: Dict[str, Language] = {
    "typescript": Language(tree_sitter_typescript.language_typescript()),
    "tsx": Language(tree_sitter_typescript.language_tsx()),
}

# Plain .ts keeps `<T>value` assertions legal; everything else may carry JSX.
_GRAMMAR_BY_SUFFIX = {
    ".js": "tsx",
    ".jsx": "tsx",
    ".ts": "typescript",
    ".tsx": "tsx",
}

SUPPORTED_SUFFIXES = frozenset(_GRAMMAR_BY_SUFFIX)

_IGNORED_TOP_LEVEL = {"hash_bang_line", "empty_statement"}

logger = get_logger("parsing.source")


@dataclass(frozen=True)
class Comment:
    """A source comment with its byte range and starting line (1-based)."""

    text: str
    start_byte: int
    end_byte: int
    line: int

    @property
    def is_block(self) -> bool:
        return self.text.startswith("/*")

    @property
    def value(self) -> str:
        """Comment body without its delimiters."""
        if self.is_block:
            body = self.text[2:]
            return body[:-2] if body.endswith("*/") else body
        return self.text[2:]

    @property
    def is_doc(self) -> bool:
        return self.is_block and self.value.startswith("*")


@dataclass
class Statement:
    """Top-level statement with the comments attached around it."""

    node: Node
    leading_comments: List[Comment] = field(default_factory=list)
    trailing_comments: List[Comment] = field(default_factory=list)


@dataclass
class ParsedSource:
    """Syntax tree of one file plus comment attachments."""

    path: str
    source: bytes
    root: Node
    statements: List[Statement]
    inner_comments: List[Comment]

    def text(self, node: Node) -> str:
        return node_text(node, self.source)

    def comment(self, node: Node) -> Comment:
        return comment_from_node(node, self.source)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")


def comment_from_node(node: Node, source: bytes) -> Comment:
    return Comment(
        text=node_text(node, source),
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        line=node.start_point[0] + 1,
    )


def supports(path: str) -> bool:
    """Return True when the path has a JavaScript/TypeScript extension."""
    return Path(path).suffix.lower() in SUPPORTED_SUFFIXES


class SourceParser:
    """Builds comment-annotated syntax trees, one parser per thread and grammar."""

    def __init__(self) -> None:
        self._local = threading.local()

    def parse(
        self,
        source: str,
        path: str,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> Optional[ParsedSource]:
        """Parse ``source``; log and return None when it is not valid syntax.

        A failure is also appended to ``diagnostics`` when a list is given.
        """
        grammar = _GRAMMAR_BY_SUFFIX.get(Path(path).suffix.lower(), "tsx")
        source_bytes = source.encode("utf-8")
        tree = self._get_parser(grammar).parse(source_bytes)
        root = tree.root_node
        if root.has_error:
            message, line = _describe_error(root)
            logger.warning("Unable to parse %s: %s", path, message)
            if diagnostics is not None:
                diagnostics.append(
                    Diagnostic(kind=SYNTAX_ERROR, path=path, message=message, line=line)
                )
            return None
        statements, inner_comments = _attach_comments(root.children, source_bytes)
        return ParsedSource(
            path=path,
            source=source_bytes,
            root=root,
            statements=statements,
            inner_comments=inner_comments,
        )

    def parse_file(
        self, path: Path, diagnostics: Optional[List[Diagnostic]] = None
    ) -> Optional[ParsedSource]:
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Unable to parse %s: %s", path, exc)
            if diagnostics is not None:
                diagnostics.append(Diagnostic(kind=SYNTAX_ERROR, path=str(path), message=str(exc)))
            return None
        return self.parse(source, str(path), diagnostics)

    def _get_parser(self, grammar: str) -> Parser:
        parsers: Dict[str, Parser] | None = getattr(self._local, "parsers", None)
        if parsers is None:
            parsers = {}
            self._local.parsers = parsers
        parser = parsers.get(grammar)
        if parser is None:
            parser = Parser(_LANGUAGES[grammar])
            parsers[grammar] = parser
        return parser


def _attach_comments(
    children: Iterable[Node], source: bytes
) -> tuple[List[Statement], List[Comment]]:
    statements: List[Statement] = []
    pending: List[Comment] = []
    for child in children:
        if child.type == "comment":
            comment = comment_from_node(child, source)
            if (
                statements
                and not pending
                and child.start_point[0] == statements[-1].node.end_point[0]
            ):
                statements[-1].trailing_comments.append(comment)
            else:
                pending.append(comment)
            continue
        if child.type in _IGNORED_TOP_LEVEL:
            continue
        statements.append(Statement(node=child, leading_comments=pending))
        pending = []

    if statements:
        statements[-1].trailing_comments.extend(pending)
        return statements, []
    return statements, pending


def _describe_error(root: Node) -> tuple[str, int]:
    """Return a message and line for the first error or missing node."""
    node = root
    while True:
        row, column = node.start_point[0] + 1, node.start_point[1] + 1
        if node.is_missing:
            return f"missing {node.type!r} at line {row}, column {column}", row
        if node.is_error:
            return f"unexpected syntax at line {row}, column {column}", row
        child = next((c for c in node.children if c.has_error or c.is_missing), None)
        if child is None:
            return f"syntax error at line {row}, column {column}", row
        node = child


__all__ = [
    "Comment",
    "ParsedSource",
    "SourceParser",
    "Statement",
    "SUPPORTED_SUFFIXES",
    "comment_from_node",
    "node_text",
    "supports",
]
