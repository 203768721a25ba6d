"""Tag grammar for documentation comments (``/** ... */``)."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Dict, List, Optional

from ..models import KIND_BLOCK, KIND_FILE, DocRecord, ParamItem
from .source import Comment

_DECORATION = re.compile(r"^\s*\*\s?")
_TAG_LINE = re.compile(r"^\s*@(\w+)(\s.*)?$")
_NAME_TOKEN = re.compile(r"[\w.$]+(?=\s|$)")
_FENCE = "```"

_TAG_ALIASES = {
    "param": "param",
    "arg": "param",
    "argument": "param",
    "returns": "returns",
    "return": "returns",
    "desc": "desc",
    "description": "desc",
    "example": "example",
    "name": "name",
    "alias": "alias",
    "file": "file",
    "fileoverview": "file",
    "overview": "file",
}

_TYPE_BRACKETS = {"<": ">", "(": ")", "{": "}", "[": "]"}


class MalformedTagHeader(ValueError):
    """Raised when a ``@param`` or ``@returns`` header does not match the grammar."""

    def __init__(self, tag: str, header: str) -> None:
        self.tag = tag
        self.header = header.strip()
        super().__init__(f"Invalid @{tag}: {self.header}")


@dataclass
class _Block:
    tag: str
    contents: List[str]
    item: Optional[ParamItem] = None


class _RecordBuilder:
    """Accumulates flushed blocks of one comment."""

    def __init__(self) -> None:
        self.kind: Optional[str] = None
        self.name: Optional[str] = None
        self.alias: Optional[str] = None
        self.desc_runs: List[str] = []
        self.params: List[ParamItem] = []
        self.returns: List[ParamItem] = []
        self.examples: List[str] = []
        self.block: Optional[_Block] = None

    def open(self, block: _Block) -> None:
        self.flush()
        self.block = block

    def append(self, line: str) -> None:
        if self.block is None:
            self.block = _Block(tag="desc", contents=[""])
        self.block.contents.append(line)

    def flush(self) -> None:
        block, self.block = self.block, None
        if block is None:
            return
        if block.tag == "desc":
            content = _block_content(block.contents)
            if content:
                self.desc_runs.append(content)
        elif block.item is not None:
            block.item.desc = _block_content(block.contents)
            target = self.params if block.tag == "param" else self.returns
            target.append(block.item)
        elif block.tag == "example":
            example = _example_content(block.contents)
            if example:
                self.examples.append(example)

    def build(self, seed: Optional[DocRecord]) -> DocRecord:
        self.flush()
        seed = seed or DocRecord()
        desc_runs = [seed.desc] if seed.desc else []
        desc_runs.extend(self.desc_runs)

        returns = replace(seed.returns) if seed.returns else None
        for item in self.returns:
            returns = merge_param(returns, item) if returns else item

        return DocRecord(
            kind=self.kind or seed.kind,
            name=self.name if self.name is not None else seed.name,
            alias=self.alias if self.alias is not None else seed.alias,
            desc="\n".join(desc_runs),
            params=_merge_params(seed.params, self.params),
            returns=returns,
            examples=list(seed.examples) + self.examples,
        )


def parse_comment(comment: Comment, seed: Optional[DocRecord] = None) -> Optional[DocRecord]:
    """Parse a doc-style block comment into a DocRecord.

    ``seed`` carries facts the caller already knows (usually the signature
    derived from the syntax tree). Returns None for comments that are not
    ``/** ... */`` blocks. Raises :class:`MalformedTagHeader` when a
    ``@param``/``@returns`` header cannot be read.
    """
    if not comment.is_doc:
        return None

    builder = _RecordBuilder()
    for line in _comment_lines(comment):
        match = _TAG_LINE.match(line)
        if match is None:
            builder.append(line)
            continue
        raw_tag, rest = match.group(1), match.group(2) or ""
        tag = _TAG_ALIASES.get(raw_tag.lower())
        if tag in ("desc", "example"):
            builder.open(_Block(tag=tag, contents=[rest]))
        elif tag in ("param", "returns"):
            item, first_row = parse_tag_header(raw_tag, rest, with_name=tag == "param")
            builder.open(_Block(tag=tag, contents=[first_row], item=item))
        elif tag in ("name", "alias"):
            builder.flush()
            if rest.strip():
                setattr(builder, tag, rest.strip())
        elif tag == "file":
            builder.kind = KIND_FILE
            if rest.strip():
                builder.open(_Block(tag="desc", contents=[rest]))
        # Unknown tags have no effect, not even on the open block.
    return builder.build(seed)


def parse_tag_header(tag: str, raw: str, *, with_name: bool = True) -> tuple[ParamItem, str]:
    """Split a tag header into its ``{type}``, name and description parts.

    Returns the partially filled ParamItem and the first description row.
    """
    item = ParamItem()
    text = raw.strip()

    if text.startswith("{"):
        end = _balanced_end(text, "{", "}")
        if end < 0 or not text[1:end].strip():
            raise MalformedTagHeader(tag, raw)
        item.type = normalise_type(text[1:end])
        text = text[end + 1 :].lstrip()

    if with_name and text.startswith("["):
        end = _balanced_end(text, "[", "]")
        if end < 0:
            raise MalformedTagHeader(tag, raw)
        name, _, default = text[1:end].partition("=")
        name = name.strip()
        if not name or not _NAME_TOKEN.fullmatch(name):
            raise MalformedTagHeader(tag, raw)
        item.name = name
        item.optional = True
        item.default = default.strip()
        text = text[end + 1 :].lstrip()
    elif with_name:
        match = _NAME_TOKEN.match(text)
        if match:
            item.name = match.group(0)
            text = text[match.end() :].lstrip()

    if text == "-" or text.startswith("- "):
        text = text[1:].lstrip()
    return item, text


def normalise_type(raw: str) -> str:
    """Return a tag type with its top-level union members joined by `` | ``."""
    members: List[str] = []
    depth = 0
    current: List[str] = []
    for char in raw:
        if char in _TYPE_BRACKETS:
            depth += 1
        elif char in _TYPE_BRACKETS.values() and depth:
            depth -= 1
        elif char == "|" and depth == 0:
            members.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    members.append("".join(current).strip())
    return " | ".join(member for member in members if member)


def merge_param(seed: Optional[ParamItem], parsed: ParamItem) -> ParamItem:
    """Combine a known parameter with a comment-derived one, field by field.

    - ``name``, ``type`` and ``default``: the seed's value when non-empty,
      otherwise the comment's.
    - ``optional``: true when either side marks the parameter optional.
    - ``desc``: the comment's text, appended to any description the seed
      already carries.
    """
    if seed is None:
        return replace(parsed)
    descs = [text for text in (seed.desc, parsed.desc) if text]
    return ParamItem(
        name=seed.name or parsed.name,
        type=seed.type or parsed.type,
        optional=seed.optional or parsed.optional,
        default=seed.default or parsed.default,
        desc="\n".join(descs),
    )


def _merge_params(seeded: List[ParamItem], parsed: List[ParamItem]) -> List[ParamItem]:
    merged = [replace(item) for item in seeded]
    positions: Dict[str, int] = {}
    for index, item in enumerate(merged):
        if item.name:
            positions.setdefault(item.name, index)
    for item in parsed:
        index = positions.get(item.name) if item.name else None
        if index is None:
            if item.name:
                positions[item.name] = len(merged)
            merged.append(replace(item))
        else:
            merged[index] = merge_param(merged[index], item)
    return merged


def _comment_lines(comment: Comment) -> List[str]:
    lines = comment.value[1:].rstrip().splitlines()
    if not lines:
        return []
    lines[0] = lines[0].strip()
    return [lines[0]] + [_DECORATION.sub("", line, count=1) for line in lines[1:]]


def _block_content(contents: List[str]) -> str:
    first = contents[0].strip()
    rows = ([first] if first else []) + [row.rstrip() for row in contents[1:]]
    while rows and not rows[0].strip():
        rows.pop(0)
    while rows and not rows[-1].strip():
        rows.pop()
    return "\n".join(rows)


def _example_content(contents: List[str]) -> str:
    caption = contents[0].strip()
    code = [row.rstrip() for row in contents[1:]]
    while code and not code[0].strip():
        code.pop(0)
    while code and not code[-1].strip():
        code.pop()
    if not code and not caption:
        return ""
    if any(row.lstrip().startswith(_FENCE) for row in [caption, *code]):
        return "\n".join([caption, *code] if caption else code)
    rows = [caption] if caption else []
    rows.extend([f"{_FENCE}js", *code, _FENCE])
    return "\n".join(rows)


def _balanced_end(text: str, opening: str, closing: str) -> int:
    depth = 0
    for index, char in enumerate(text):
        if char == opening:
            depth += 1
        elif char == closing:
            depth -= 1
            if depth == 0:
                return index
    return -1


__all__ = [
    "MalformedTagHeader",
    "merge_param",
    "normalise_type",
    "parse_comment",
    "parse_tag_header",
]
