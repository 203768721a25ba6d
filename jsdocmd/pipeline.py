"""Event-driven pipeline from file changes to rendered module documents."""

from __future__ import annotations

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path, PurePath
from typing import Dict, Iterable, List, Optional, Tuple

from .binders import AstDeclarationBinder, Binder
from .config import PipelineConfig
from .host import DocumentHost, InMemoryDocumentHost
from .logging import configure_logging, get_logger
from .models import Diagnostic, DocRecord, ModuleDocument, document_id
from .parsing.source import SourceParser, supports
from .rendering.markdown import MarkdownRenderer
from .stores import AggregationStore

DISCOVERED = "discovered"
CHANGED = "changed"
DELETED = "deleted"


@dataclass(frozen=True)
class FileEvent:
    """A change notification for one file, as delivered by the host."""

    kind: str
    file_id: str
    absolute_path: Optional[str] = None
    relative_path: Optional[str] = None


@dataclass
class FileResult:
    """Outcome of extracting documentation from one file."""

    file_id: str
    module: str
    records: List[DocRecord]
    diagnostics: List[Diagnostic] = field(default_factory=list)


@dataclass
class BatchOutcome:
    """Modules whose documents were written, deleted or left as they were."""

    updated: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)


class EventChannel:
    """Ordered single-consumer queue between host callbacks and the pipeline."""

    def __init__(self) -> None:
        self._queue: "queue.Queue[FileEvent]" = queue.Queue()

    def put(self, event: FileEvent) -> None:
        self._queue.put(event)

    def drain(self) -> List[FileEvent]:
        events: List[FileEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def __len__(self) -> int:
        return self._queue.qsize()


class DocPipeline:
    """Keeps one Markdown document per module in sync with source file events.

    Host callbacks only enqueue events. :meth:`pump` is the single writer:
    it parses the batch concurrently, applies the results to the store one
    at a time and then renders every dirty module.
    """

    def __init__(
        self,
        config: PipelineConfig,
        host: DocumentHost,
        *,
        parser: SourceParser | None = None,
        binder: Binder | None = None,
        store: AggregationStore | None = None,
        renderer: MarkdownRenderer | None = None,
    ) -> None:
        self.config = config
        self.host = host
        self.parser = parser or SourceParser()
        self.binder = binder or AstDeclarationBinder()
        self.store = store or AggregationStore()
        self.renderer = renderer or MarkdownRenderer(host.locale)
        self.channel = EventChannel()
        self.logger = get_logger("pipeline")
        self._lock = threading.Lock()
        self._known_paths: Dict[str, Tuple[str, Optional[str]]] = {}
        self._diagnostics: Dict[str, List[Diagnostic]] = {}

    @classmethod
    def from_config(
        cls, config: PipelineConfig, host: DocumentHost | None = None
    ) -> "DocPipeline":
        """Build a pipeline, defaulting to an in-memory host using the config's locale.

        Logging is configured when the config asks for verbose output or a
        log file.
        """
        if config.verbose or config.log_file is not None:
            configure_logging(verbose=config.verbose, log_file=config.log_file)
        return cls(config, host or InMemoryDocumentHost(config.locale))

    # ------------------------------------------------------------------
    # Host callbacks

    def on_file_discovered(self, file_id: str, absolute_path: str, relative_path: str) -> None:
        self.channel.put(FileEvent(DISCOVERED, file_id, absolute_path, relative_path))

    def on_file_changed(
        self, file_id: str, absolute_path: str, relative_path: str | None = None
    ) -> None:
        self.channel.put(FileEvent(CHANGED, file_id, absolute_path, relative_path))

    def on_file_deleted(self, file_id: str) -> None:
        self.channel.put(FileEvent(DELETED, file_id))

    def populate(self, files: Iterable[Tuple[str, str, str]]) -> BatchOutcome:
        """Process an initial ``(file_id, absolute_path, relative_path)`` listing."""
        for file_id, absolute_path, relative_path in files:
            self.on_file_discovered(file_id, absolute_path, relative_path)
        return self.pump()

    # ------------------------------------------------------------------
    # Processing

    def pump(self) -> BatchOutcome:
        """Apply every queued event, then render or delete the dirty modules."""
        with self._lock:
            events = self.channel.drain()
            if not events:
                return BatchOutcome()

            latest: Dict[str, FileEvent] = {}
            for event in events:
                latest.pop(event.file_id, None)
                latest[event.file_id] = event

            removals: List[str] = []
            jobs: List[Tuple[str, str, str]] = []
            for event in latest.values():
                target = self._resolve(event)
                if target is None:
                    removals.append(event.file_id)
                else:
                    jobs.append((event.file_id, *target))

            self.logger.debug(
                "Processing %d events (%d parses, %d removals)", len(events), len(jobs), len(removals)
            )
            results = self._parse_all(jobs)

            for file_id in removals:
                self.store.remove(file_id)
                self._diagnostics.pop(file_id, None)
            for result in results:
                self.store.upsert(result.module, result.file_id, result.records)
                self._diagnostics[result.file_id] = result.diagnostics

            return self._render_dirty()

    def module_name_for(self, absolute_path: str, relative_path: str | None = None) -> Optional[str]:
        """Return the module a path belongs to, or None when it is not processed."""
        if not supports(absolute_path):
            return None
        try:
            relative = Path(absolute_path).resolve().relative_to(self.config.source_dir)
        except ValueError:
            return None
        if not relative.parts:
            return None
        if self.config.match:
            candidate = PurePath(relative_path).as_posix() if relative_path else relative.as_posix()
            if not any(fnmatchcase(candidate, pattern) for pattern in self.config.match):
                return None
        return relative.parts[0]

    def diagnostics(self, file_id: str) -> List[Diagnostic]:
        """Problems found during the latest extraction of ``file_id``."""
        return list(self._diagnostics.get(file_id, []))

    def process_file(self, file_id: str, module: str, absolute_path: str) -> FileResult:
        """Parse and bind one file; never raises."""
        diagnostics: List[Diagnostic] = []
        try:
            parsed = self.parser.parse_file(Path(absolute_path), diagnostics)
            if parsed is None:
                return FileResult(file_id, module, [], diagnostics)
            bound = self.binder.bind(parsed)
        except Exception:
            self.logger.exception("Failed to extract documentation from %s", absolute_path)
            return FileResult(file_id, module, [], diagnostics)
        diagnostics.extend(bound.diagnostics)
        return FileResult(file_id, module, bound.records, diagnostics)

    def _resolve(self, event: FileEvent) -> Optional[Tuple[str, str]]:
        if event.kind == DELETED:
            self._known_paths.pop(event.file_id, None)
            return None
        known_absolute, known_relative = self._known_paths.get(event.file_id, (None, None))
        absolute_path = event.absolute_path or known_absolute
        relative_path = event.relative_path or known_relative
        if absolute_path is None:
            return None
        self._known_paths[event.file_id] = (absolute_path, relative_path)
        module = self.module_name_for(absolute_path, relative_path)
        if module is None:
            return None
        return module, absolute_path

    def _parse_all(self, jobs: List[Tuple[str, str, str]]) -> List[FileResult]:
        if not jobs:
            return []
        if len(jobs) == 1:
            return [self.process_file(*jobs[0])]
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = [executor.submit(self.process_file, *job) for job in jobs]
            return [future.result() for future in futures]

    def _render_dirty(self) -> BatchOutcome:
        outcome = BatchOutcome()
        for module in sorted(self.store.dirty_modules()):
            doc_id = document_id(module)
            existing = self.host.get_document(doc_id)
            if module not in self.store:
                if existing is not None:
                    self.host.delete_document(doc_id)
                    outcome.deleted.append(module)
                    self.logger.info("Deleted %s", doc_id)
                continue

            rendered = self.renderer.render(module, self.store.bucket(module))
            document = ModuleDocument(
                id=doc_id,
                module=module,
                content=rendered.content,
                digest=rendered.digest,
                source_files=frozenset(self.store.files(module)),
            )
            if (
                existing is not None
                and existing.digest == document.digest
                and existing.source_files == document.source_files
            ):
                outcome.unchanged.append(module)
                self.logger.debug("%s unchanged", doc_id)
                continue
            self.host.create_document(document)
            outcome.updated.append(module)
            self.logger.info("Rendered %s from %d files", doc_id, len(document.source_files))
        return outcome


__all__ = [
    "BatchOutcome",
    "CHANGED",
    "DELETED",
    "DISCOVERED",
    "DocPipeline",
    "EventChannel",
    "FileEvent",
    "FileResult",
]
