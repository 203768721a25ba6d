"""Source and comment parsing."""

from .source import Comment, ParsedSource, SourceParser, Statement, supports
from .tags import MalformedTagHeader, merge_param, parse_comment

__all__ = [
    "Comment",
    "MalformedTagHeader",
    "ParsedSource",
    "SourceParser",
    "Statement",
    "merge_param",
    "parse_comment",
    "supports",
]
