"""Thread-safe inverted index with striped per-word locks.

Each word owns a lock created lazily the first time the word is written.
Writers to different words never contend; readers take only the lock of the
word they inspect and always receive copies. A short registry lock guards
lock creation and the top-level word map, and a per-location lock keeps one
document's position stream from interleaving with another batch for the same
location.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
import logging
import threading

from memsearch.search.index import InvertedIndex


logger = logging.getLogger(__name__)


class ConcurrentInvertedIndex(InvertedIndex):
    """Inverted index that is safe under many concurrent writers and readers."""

    def __init__(self) -> None:
        super().__init__()
        self._registry_lock = threading.Lock()
        self._word_locks: dict[str, threading.Lock] = {}
        self._location_locks: dict[str, threading.Lock] = {}

    def _get_or_create_lock(self, registry: dict[str, threading.Lock], key: str) -> threading.Lock:
        with self._registry_lock:
            lock = registry.get(key)
            if lock is None:
                lock = threading.Lock()
                registry[key] = lock
            return lock

    def add(self, word: str, location: str, position: int) -> bool:
        with self._get_or_create_lock(self._word_locks, word):
            return super().add(word, location, position)

    def add_all(self, words: Iterable[str], location: str, start: int = 1) -> int:
        with self._get_or_create_lock(self._location_locks, location):
            return super().add_all(words, location, start)

    def clear(self) -> None:
        with self._registry_lock:
            super().clear()
            self._word_locks.clear()
            self._location_locks.clear()

    def _insert_word(self, word: str, locations: dict[str, set[int]]) -> None:
        # Called with the word lock held; the registry lock orders the resize against snapshots.
        with self._registry_lock:
            super()._insert_word(word, locations)

    @contextmanager
    def _read_word(self, word: str) -> Iterator[dict[str, set[int]] | None]:
        lock = self._word_locks.get(word)
        if lock is None:
            # Never written: the read linearizes before the first add of this word.
            yield None
            return
        with lock:
            yield self._index.get(word)

    def _word_snapshot(self) -> list[str]:
        with self._registry_lock:
            return super()._word_snapshot()

    def word_count(self) -> int:
        with self._registry_lock:
            return len(self._index)
