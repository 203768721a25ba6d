"""Core data models shared across jsdocmd components."""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

KIND_FILE = "file"
KIND_BLOCK = "block"

MARKDOWN_MEDIA_TYPE = "text/markdown"

SYNTAX_ERROR = "SyntaxError"
UNSUPPORTED_DECLARATION_SHAPE = "UnsupportedDeclarationShape"
MALFORMED_TAG_HEADER = "MalformedTagHeader"


@dataclass
class ParamItem:
    """A documented parameter or return value."""

    name: str = ""
    type: str = ""
    optional: bool = False
    default: str = ""
    desc: str = ""


@dataclass
class DocRecord:
    """One documentation unit bound to a file or a declaration."""

    kind: str = KIND_BLOCK
    name: str = ""
    alias: Optional[str] = None
    desc: str = ""
    params: List[ParamItem] = field(default_factory=list)
    returns: Optional[ParamItem] = None
    examples: List[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True)
class Diagnostic:
    """Non-fatal problem found while extracting documentation from a file."""

    kind: str
    path: str
    message: str
    line: Optional[int] = None


@dataclass(frozen=True)
class ModuleDocument:
    """Rendered Markdown document for one module."""

    id: str
    module: str
    content: str
    digest: str
    source_files: FrozenSet[str]
    media_type: str = MARKDOWN_MEDIA_TYPE


def document_id(module: str) -> str:
    """Return the identifier of the document rendered for ``module``."""
    return f"doc:{module}"
