"""Parallel per-file analysis and result merging."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import queue
from threading import Lock
from typing import TYPE_CHECKING, Literal

from cxxrag_index.frontend.base import ParseError

from .aggregator import ChunkAggregator
from .partition import partition_files

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from cxxrag_index.chunking.base import CodeChunk
    from cxxrag_index.chunking.visitor import ChunkExtractor
    from cxxrag_index.frontend.base import Frontend
    from cxxrag_index.frontend.compile_db import BuildDatabase, CompileJob

__all__ = ["FileResult", "IndexResult", "IndexRunner", "ProgressCounter", "Schedule"]

Schedule = Literal["static", "dynamic"]


@dataclass(slots=True)
class FileResult:
    """Chunks and errors produced by one compile job."""

    job: CompileJob
    chunks: list[CodeChunk] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """Return ``True`` when parsing reported a failure."""
        return bool(self.errors)


@dataclass(slots=True)
class IndexResult:
    """Merged outcome of a complete indexing run."""

    chunks: list[CodeChunk]
    files_total: int
    failed_files: list[str]

    @property
    def failed(self) -> bool:
        """Return ``True`` when any file failed to parse cleanly."""
        return bool(self.failed_files)


class ProgressCounter:
    """Shared count of claimed files rendered as progress lines."""

    def __init__(self, total: int) -> None:
        """Track progress towards ``total`` files."""
        self.total = total
        self._done = 0
        self._lock = Lock()

    def advance(self, count: int) -> str:
        """Record ``count`` more claimed files and return the progress line."""
        with self._lock:
            self._done += count
            return f"[{self._done}/{self.total}] chunk load"


@dataclass(slots=True)
class IndexRunner:
    """Run the extractor over every file of a build database in parallel.

    With the ``static`` schedule the file list is split into one contiguous
    slice per worker; with ``dynamic`` each file is its own job on a pool of
    ``workers`` threads. Workers send finished per-file results to the
    coordinator, which merges them into a :class:`ChunkAggregator` in
    completion order once every worker has returned.
    """

    frontend: Frontend
    extractor: ChunkExtractor
    workers: int = 1
    schedule: Schedule = "static"
    system_include: str | None = None
    extra_args: Sequence[str] = ()
    log: Callable[[str], None] | None = None

    def run(self, database: BuildDatabase) -> IndexResult:
        """Index every file in ``database`` and return the merged result."""
        files = database.files
        progress = ProgressCounter(len(files))
        outbox: queue.SimpleQueue[FileResult] = queue.SimpleQueue()
        batches = self._batches(files)
        if batches:
            pool_size = min(self.workers, len(batches))
            with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="cxxrag-worker") as pool:
                futures = [
                    pool.submit(self._process_batch, batch, database, progress, outbox) for batch in batches
                ]
                for future in futures:
                    future.result()

        aggregator = ChunkAggregator()
        failed_files: dict[str, None] = {}
        while not outbox.empty():
            result = outbox.get_nowait()
            aggregator.extend(result.chunks)
            if result.failed:
                failed_files[result.job.filename] = None
        return IndexResult(
            chunks=aggregator.snapshot(),
            files_total=len(files),
            failed_files=list(failed_files),
        )

    def analyze(self, job: CompileJob) -> FileResult:
        """Parse one compile job and extract its chunks."""
        try:
            unit = self.frontend.parse(job.filename, self.arguments(job))
        except ParseError as exc:
            self._emit(str(exc))
            return FileResult(job=job, errors=[str(exc)])

        result = FileResult(job=job)
        for diagnostic in unit.diagnostics:
            if diagnostic.severity == "ignored":
                continue
            self._emit(str(diagnostic))
            if diagnostic.is_error:
                result.errors.append(str(diagnostic))
        result.chunks = self.extractor.extract(unit)
        return result

    def arguments(self, job: CompileJob) -> tuple[str, ...]:
        """Return the frontend arguments for ``job`` with the system include injected."""
        injected = ("-isystem", self.system_include) if self.system_include else ()
        return (*injected, *job.arguments, *self.extra_args)

    def _batches(self, files: Sequence[str]) -> list[list[str]]:
        if self.schedule == "dynamic":
            return [[name] for name in files]
        return [batch for batch in partition_files(files, self.workers) if batch]

    def _process_batch(
        self,
        batch: Sequence[str],
        database: BuildDatabase,
        progress: ProgressCounter,
        outbox: queue.SimpleQueue[FileResult],
    ) -> None:
        self._emit(progress.advance(len(batch)))
        for filename in batch:
            for job in database.jobs_for(filename):
                try:
                    result = self.analyze(job)
                except Exception as exc:  # pragma: no cover - defensive guard
                    self._emit(f"Analysis of {job.filename} failed: {exc}")
                    result = FileResult(job=job, errors=[str(exc)])
                outbox.put(result)

    def _emit(self, message: str) -> None:
        if self.log is not None:
            self.log(message)
