"""Markdown rendering."""

from .markdown import MarkdownRenderer, RenderedDocument, as_code, fingerprint

__all__ = ["MarkdownRenderer", "RenderedDocument", "as_code", "fingerprint"]
