"""Query engine: parse query lines, search the index, keep ranked results.

A query is identified by the sorted set of its stemmed terms joined with a
single space, so lines that differ only in word order, repetition, case or
punctuation share one answer and are only searched once.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
from pathlib import Path
import threading

from memsearch.observability.metrics import SEARCH_LATENCY, track_latency
from memsearch.observability.tracing import create_span
from memsearch.search.analyzers import get_analyzer, stem_unique
from memsearch.search.index import InvertedIndex
from memsearch.search.models import SearchResult
from memsearch.utils.work_queue import DEFAULT_THREADS, WorkQueue


logger = logging.getLogger(__name__)


def query_key(terms: list[str]) -> str:
    return " ".join(terms)


def _mode(exact: bool) -> str:
    return "exact" if exact else "partial"


class QueryEngine:
    """Answer queries against an index, memoising by mode and canonical query key.

    Exact and partial answers are kept apart, so one engine can answer the
    same queries in both modes. ``results``, ``queries()`` and ``len()``
    describe the mode of the most recent call.
    """

    def __init__(self, index: InvertedIndex, *, analyzer: str | None = None) -> None:
        self.index = index
        self.analyzer = analyzer
        self._results: dict[bool, dict[str, list[SearchResult]]] = {True: {}, False: {}}
        self._exact = False
        self._counts: Mapping[str, int] | None = None

    def parse_file(self, path: Path, exact: bool) -> dict[str, list[SearchResult]]:
        """Answer every line of ``path``.

        A missing or unreadable query file is logged and leaves the results
        untouched.

        Returns:
            Snapshot of all results answered so far in this mode
        """
        self._exact = exact
        try:
            with create_span("query_file", attributes={"query.path": str(path), "query.mode": _mode(exact)}):
                with path.open(encoding="utf-8") as handle:
                    self._counts = self.index.location_word_counts()
                    self._run(handle, exact)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Unable to read query file {path}: {e}")
        finally:
            self._counts = None

        logger.info(f"Answered {len(self)} distinct {_mode(exact)} queries from {path}")
        return self.results

    def _run(self, lines, exact: bool) -> None:
        for line in lines:
            self.parse_line(line, exact)

    def parse_line(self, line: str, exact: bool) -> list[SearchResult] | None:
        """Answer one query line.

        Returns:
            The ranked results for the line's query key, or None for a line
            with no searchable terms
        """
        self._exact = exact
        terms = stem_unique(line, get_analyzer(self.analyzer))
        if not terms:
            return None

        key = query_key(terms)
        answered = self._results[exact]
        existing = answered.get(key)
        if existing is not None:
            return existing

        ranked = self._search(terms, exact)
        answered[key] = ranked
        return ranked

    def _search(self, terms: list[str], exact: bool) -> list[SearchResult]:
        with track_latency(SEARCH_LATENCY, mode=_mode(exact)):
            return self.index.search(terms, exact, self._counts)

    def results_for(self, exact: bool) -> dict[str, list[SearchResult]]:
        """Sorted copy of query key -> ranked results for one mode."""
        answered = self._results[exact]
        return {key: list(answered[key]) for key in sorted(answered)}

    @property
    def results(self) -> dict[str, list[SearchResult]]:
        return self.results_for(self._exact)

    def queries(self) -> list[str]:
        return sorted(self._results[self._exact])

    def __len__(self) -> int:
        return len(self._results[self._exact])


class ConcurrentQueryEngine(QueryEngine):
    """Query engine that answers each query line on a work queue task.

    A (mode, key) pair is claimed before it is searched, so concurrent lines
    with the same key never search twice and the results maps only ever hold
    finished lists.
    """

    def __init__(
        self,
        index: InvertedIndex,
        *,
        queue: WorkQueue | None = None,
        threads: int = DEFAULT_THREADS,
        analyzer: str | None = None,
    ) -> None:
        super().__init__(index, analyzer=analyzer)
        self._queue = queue
        self._threads = threads
        self._lock = threading.Lock()
        self._claimed: set[tuple[bool, str]] = set()

    def _run(self, lines, exact: bool) -> None:
        owns_queue = self._queue is None
        queue = self._queue or WorkQueue(self._threads, name="query")
        try:
            for line in lines:
                queue.execute(_QueryLineTask(self, line, exact))
            queue.finish()
        finally:
            if owns_queue:
                queue.shutdown()

    def parse_line(self, line: str, exact: bool) -> list[SearchResult] | None:
        self._exact = exact
        terms = stem_unique(line, get_analyzer(self.analyzer))
        if not terms:
            return None

        claim = (exact, query_key(terms))
        with self._lock:
            if claim in self._claimed:
                return self._results[exact].get(claim[1])
            self._claimed.add(claim)

        try:
            ranked = self._search(terms, exact)
        except Exception:
            with self._lock:
                self._claimed.discard(claim)
            raise
        with self._lock:
            self._results[exact][claim[1]] = ranked
        return ranked

    def results_for(self, exact: bool) -> dict[str, list[SearchResult]]:
        with self._lock:
            return super().results_for(exact)

    def queries(self) -> list[str]:
        with self._lock:
            return super().queries()

    def __len__(self) -> int:
        with self._lock:
            return super().__len__()


class _QueryLineTask:
    def __init__(self, engine: QueryEngine, line: str, exact: bool) -> None:
        self.engine = engine
        self.line = line
        self.exact = exact

    def __call__(self) -> None:
        self.engine.parse_line(self.line, self.exact)

    def __repr__(self) -> str:
        return f"QueryLineTask({self.line.strip()!r})"
