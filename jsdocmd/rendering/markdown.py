"""Deterministic Markdown rendering of a module's documentation records."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..config import Locale
from ..models import KIND_FILE, DocRecord, ParamItem

_TYPE_ESCAPES = re.compile(r"([<>*])")
_BACKTICK_RUN = re.compile(r"`+")


@dataclass(frozen=True)
class RenderedDocument:
    """Markdown text with its SHA-256 fingerprint."""

    content: str
    digest: str


class MarkdownRenderer:
    """Renders one module's records into a single Markdown document."""

    def __init__(self, locale: Optional[Locale] = None) -> None:
        self.locale = locale or Locale()

    def render(self, module: str, records: Iterable[DocRecord]) -> RenderedDocument:
        items = sorted(records, key=_sort_key)
        title = module
        if items and items[0].kind == KIND_FILE and items[0].alias:
            title = items[0].alias

        blocks = [f"# {title}"]
        for item in items:
            block = self.render_record(item)
            if block:
                blocks.append(block)

        lines = "\n\n".join(blocks).split("\n")
        content = "\n".join(line.rstrip() for line in lines).rstrip("\n") + "\n"
        return RenderedDocument(content=content, digest=fingerprint(content))

    def render_record(self, record: DocRecord) -> str:
        lines: List[str] = []
        if record.kind != KIND_FILE and record.display_name:
            lines.append(f"## {record.display_name}")
        if record.desc:
            lines.extend(["", record.desc])

        sections: Tuple[Tuple[str, List[ParamItem]], ...] = (
            (self.locale.params, record.params),
            (self.locale.returns, [record.returns] if record.returns else []),
        )
        for heading, entries in sections:
            if not entries:
                continue
            lines.extend(["", f"#### {heading}"])
            for entry in entries:
                lines.extend(["", self._bullet(entry)])
                if entry.desc:
                    lines.append("")
                    lines.extend(f"    {row}" if row else "" for row in entry.desc.split("\n"))

        if record.examples:
            lines.extend(["", f"#### {self.locale.example}"])
            for example in record.examples:
                lines.extend(["", example])

        return "\n".join(lines).strip("\n")

    def _bullet(self, entry: ParamItem) -> str:
        parts: List[str] = []
        if entry.name:
            parts.append(as_code(entry.name))
        if entry.type:
            escaped = _TYPE_ESCAPES.sub(r"\\\1", entry.type)
            parts.append(f"*{escaped}*")
        if entry.optional:
            parts.append(f"({self.locale.optional})")
        if entry.default:
            parts.append(f"{self.locale.default_as} {as_code(entry.default)}")
        return f"- {' '.join(parts)}".rstrip()


def as_code(text: str) -> str:
    """Wrap ``text`` in a code span long enough to hold its own backticks."""
    runs = _BACKTICK_RUN.findall(text)
    if not runs:
        return f"`{text}`"
    fence = "`" * (max(len(run) for run in runs) + 1)
    return f"{fence} {text} {fence}"


def fingerprint(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def _sort_key(record: DocRecord) -> Tuple[int, str]:
    return (0 if record.kind == KIND_FILE else 1, record.display_name)


__all__ = ["MarkdownRenderer", "RenderedDocument", "as_code", "fingerprint"]
