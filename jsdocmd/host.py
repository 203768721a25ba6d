"""Capabilities the pipeline needs from the system embedding it."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .config import Locale
from .models import ModuleDocument


class DocumentHost(ABC):
    """Receives rendered module documents and supplies renderer labels."""

    @property
    @abstractmethod
    def locale(self) -> Locale:
        """Labels used when rendering documents."""

    @abstractmethod
    def create_document(self, document: ModuleDocument) -> None:
        """Create or replace the document stored under ``document.id``."""

    @abstractmethod
    def delete_document(self, document_id: str) -> None:
        """Remove a previously created document."""

    @abstractmethod
    def get_document(self, document_id: str) -> Optional[ModuleDocument]:
        """Return the current document for ``document_id`` if one exists."""


class InMemoryDocumentHost(DocumentHost):
    """Keeps documents in a dictionary keyed by document id."""

    def __init__(self, locale: Locale | None = None) -> None:
        self._locale = locale or Locale()
        self.documents: Dict[str, ModuleDocument] = {}
        self.deleted: List[str] = []

    @property
    def locale(self) -> Locale:
        return self._locale

    def create_document(self, document: ModuleDocument) -> None:
        self.documents[document.id] = document

    def delete_document(self, document_id: str) -> None:
        if self.documents.pop(document_id, None) is not None:
            self.deleted.append(document_id)

    def get_document(self, document_id: str) -> Optional[ModuleDocument]:
        return self.documents.get(document_id)


__all__ = ["DocumentHost", "InMemoryDocumentHost"]
