"""Index text files from a directory tree, serially or on a work queue.

Each file is read as UTF-8, stemmed, and added to the index with positions
starting at 1. The file path (as discovered under the root) is the location.
Files that cannot be read are logged and skipped; they never abort a build.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path
import threading
import time

from memsearch.observability.metrics import DOCUMENTS_INDEXED
from memsearch.observability.tracing import create_span
from memsearch.search.analyzers import get_analyzer, stem_text
from memsearch.search.concurrent_index import ConcurrentInvertedIndex
from memsearch.search.index import InvertedIndex
from memsearch.utils.files import DEFAULT_TEXT_EXTENSIONS, iter_text_files
from memsearch.utils.work_queue import DEFAULT_THREADS, WorkQueue


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexBuildResult:
    """Outcome of an indexing run."""

    documents_indexed: int
    documents_skipped: int
    errors: tuple[str, ...] = field(default_factory=tuple)


def index_file(path: Path, index: InvertedIndex, analyzer: str | None = None) -> int:
    """Stem ``path`` into ``index``.

    Returns:
        Number of positions added

    Raises:
        OSError: If the file cannot be read
        UnicodeDecodeError: If the file is not valid UTF-8
    """
    text = path.read_text(encoding="utf-8")
    words = stem_text(text, get_analyzer(analyzer))
    return index.add_all(words, str(path), start=1)


class FileIndexer:
    """Index every text file under a root path on the calling thread."""

    source = "file"

    def __init__(
        self,
        index: InvertedIndex,
        *,
        extensions: Sequence[str] = DEFAULT_TEXT_EXTENSIONS,
        analyzer: str | None = None,
    ) -> None:
        self.index = index
        self.extensions = tuple(extensions)
        self.analyzer = analyzer
        self._lock = threading.Lock()
        self._indexed = 0
        self._errors: list[str] = []

    def index_path(self, root: Path) -> IndexBuildResult:
        """Index ``root`` (a file or a directory tree)."""
        self._indexed = 0
        self._errors = []

        start = time.perf_counter()
        with create_span("index_path", attributes={"index.root": str(root), "index.source": self.source}):
            self._run(root)

        result = IndexBuildResult(
            documents_indexed=self._indexed,
            documents_skipped=len(self._errors),
            errors=tuple(self._errors),
        )
        logger.info(
            f"Indexed {result.documents_indexed} files from {root} "
            f"({result.documents_skipped} skipped) in {time.perf_counter() - start:.2f}s"
        )
        return result

    def _run(self, root: Path) -> None:
        for path in iter_text_files(root, self.extensions):
            self._index_one(path)

    def _index_one(self, path: Path) -> None:
        try:
            added = index_file(path, self.index, self.analyzer)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable file {path}: {e}")
            with self._lock:
                self._errors.append(f"{path}: {e}")
            return

        DOCUMENTS_INDEXED.labels(source=self.source).inc()
        logger.debug(f"Indexed {added} words from {path}")
        with self._lock:
            self._indexed += 1


class ConcurrentFileIndexer(FileIndexer):
    """Index text files with one work queue task per file."""

    def __init__(
        self,
        index: ConcurrentInvertedIndex,
        *,
        queue: WorkQueue | None = None,
        threads: int = DEFAULT_THREADS,
        extensions: Sequence[str] = DEFAULT_TEXT_EXTENSIONS,
        analyzer: str | None = None,
    ) -> None:
        super().__init__(index, extensions=extensions, analyzer=analyzer)
        self._queue = queue
        self._threads = threads

    def _run(self, root: Path) -> None:
        owns_queue = self._queue is None
        queue = self._queue or WorkQueue(self._threads, name="file-indexer")
        try:
            for path in iter_text_files(root, self.extensions):
                queue.execute(_IndexFileTask(self, path))
            queue.finish()
        finally:
            if owns_queue:
                queue.shutdown()


class _IndexFileTask:
    def __init__(self, indexer: FileIndexer, path: Path) -> None:
        self.indexer = indexer
        self.path = path

    def __call__(self) -> None:
        self.indexer._index_one(self.path)

    def __repr__(self) -> str:
        return f"IndexFileTask({str(self.path)!r})"
