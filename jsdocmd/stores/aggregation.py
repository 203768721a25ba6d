"""Incremental per-module aggregation of file documentation records."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Set

from ..models import DocRecord


class AggregationStore:
    """Maps module names to the record lists contributed by each of their files.

    A reverse index (file id to module name) locates a file's previous
    contribution when it moves between modules or is removed. A module is
    present only while at least one file contributes to it.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, Dict[str, List[DocRecord]]] = {}
        self._owners: Dict[str, str] = {}
        self._dirty: Set[str] = set()

    def upsert(self, module: str, file_id: str, records: Sequence[DocRecord]) -> None:
        """Replace the records a file contributes; empty records remove the file."""
        if not records:
            self.remove(file_id)
            return
        previous = self._owners.get(file_id)
        if previous is not None and previous != module:
            self._discard(previous, file_id)
        self._modules.setdefault(module, {})[file_id] = list(records)
        self._owners[file_id] = module
        self._dirty.add(module)

    def remove(self, file_id: str) -> None:
        """Drop a file's contribution; unknown ids are ignored."""
        module = self._owners.get(file_id)
        if module is None:
            return
        self._discard(module, file_id)

    def dirty_modules(self) -> Set[str]:
        """Return the modules changed since the previous call and reset the set."""
        dirty, self._dirty = self._dirty, set()
        return dirty

    def bucket(self, module: str) -> List[DocRecord]:
        files = self._modules.get(module, {})
        return [record for file_id in sorted(files) for record in files[file_id]]

    def files(self, module: str) -> Set[str]:
        return set(self._modules.get(module, {}))

    def module_of(self, file_id: str) -> Optional[str]:
        return self._owners.get(file_id)

    def modules(self) -> List[str]:
        return sorted(self._modules)

    def __contains__(self, module: object) -> bool:
        return module in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def _discard(self, module: str, file_id: str) -> None:
        files = self._modules.get(module)
        if files is not None:
            files.pop(file_id, None)
            if not files:
                del self._modules[module]
        self._owners.pop(file_id, None)
        self._dirty.add(module)


__all__ = ["AggregationStore"]
