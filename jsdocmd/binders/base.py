"""Base classes for declaration binders."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List

from ..models import Diagnostic, DocRecord
from ..parsing.source import ParsedSource


@dataclass
class BindResult:
    """Records extracted from one file plus the problems met on the way."""

    records: List[DocRecord] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class Binder(ABC):
    """Contract for strategies that turn a parsed file into DocRecords."""

    @abstractmethod
    def bind(self, parsed: ParsedSource) -> BindResult:
        """Return the documentation records bound to the file's declarations."""
