"""Render JSDoc-style comments from JavaScript/TypeScript sources into per-module Markdown."""

from .config import ConfigError, Locale, PipelineConfig, load_config
from .host import DocumentHost, InMemoryDocumentHost
from .models import DocRecord, ModuleDocument, ParamItem
from .pipeline import BatchOutcome, DocPipeline

__all__ = [
    "BatchOutcome",
    "ConfigError",
    "DocPipeline",
    "DocRecord",
    "DocumentHost",
    "InMemoryDocumentHost",
    "Locale",
    "ModuleDocument",
    "ParamItem",
    "PipelineConfig",
    "load_config",
]
