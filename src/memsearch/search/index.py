"""In-memory inverted index mapping words to locations and positions.

The index stores ``word -> location -> {positions}``. Every read returns a
copy, an empty container or zero for unknown keys, so callers never have to
branch on a missing word or location. Iteration over words and locations is
always lexicographic to keep exported output deterministic.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
import logging

from memsearch.search.models import SearchResult


logger = logging.getLogger(__name__)


class InvertedIndex:
    """Word -> location -> position index with exact and prefix search."""

    def __init__(self) -> None:
        self._index: dict[str, dict[str, set[int]]] = {}
        self._sorted_words: list[str] | None = None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def add(self, word: str, location: str, position: int) -> bool:
        """Add ``word`` at ``position`` of ``location``.

        Returns:
            True if the position was new, False if it was already present.

        Raises:
            ValueError: If ``position`` is not a positive integer
        """
        if position < 1:
            raise ValueError(f"Positions start at 1, got {position} for {word!r} in {location!r}")

        locations = self._index.get(word)
        if locations is None:
            self._insert_word(word, {location: {position}})
            return True

        positions = locations.get(location)
        if positions is None:
            locations[location] = {position}
            return True

        if position in positions:
            return False
        positions.add(position)
        return True

    def add_all(self, words: Iterable[str], location: str, start: int = 1) -> int:
        """Add ``words`` at consecutive positions beginning with ``start``.

        Returns:
            Number of positions that were not already present.
        """
        if start < 1:
            raise ValueError(f"Positions start at 1, got start={start} for {location!r}")
        added = 0
        for offset, word in enumerate(words):
            if self.add(word, location, start + offset):
                added += 1
        return added

    def clear(self) -> None:
        self._index.clear()
        self._sorted_words = None

    def _insert_word(self, word: str, locations: dict[str, set[int]]) -> None:
        self._index[word] = locations
        self._sorted_words = None

    # ------------------------------------------------------------------
    # Read primitives
    # ------------------------------------------------------------------
    @contextmanager
    def _read_word(self, word: str) -> Iterator[dict[str, set[int]] | None]:
        """Yield the live location map for ``word`` (or None) while it is safe to read."""
        yield self._index.get(word)

    def _word_snapshot(self) -> list[str]:
        if self._sorted_words is None:
            self._sorted_words = sorted(self._index)
        return self._sorted_words

    # ------------------------------------------------------------------
    # Counts and membership
    # ------------------------------------------------------------------
    def word_count(self) -> int:
        return len(self._index)

    def location_count(self, word: str) -> int:
        with self._read_word(word) as locations:
            return len(locations) if locations else 0

    def position_count(self, word: str, location: str) -> int:
        with self._read_word(word) as locations:
            if not locations:
                return 0
            return len(locations.get(location, ()))

    def contains_word(self, word: str) -> bool:
        with self._read_word(word) as locations:
            return bool(locations)

    def contains_location(self, word: str, location: str) -> bool:
        with self._read_word(word) as locations:
            return bool(locations) and location in locations

    def contains_position(self, word: str, location: str, position: int) -> bool:
        with self._read_word(word) as locations:
            if not locations:
                return False
            return position in locations.get(location, ())

    def __len__(self) -> int:
        return self.word_count()

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains_word(word)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def words(self) -> list[str]:
        return list(self._word_snapshot())

    def locations(self, word: str) -> list[str]:
        with self._read_word(word) as locations:
            return sorted(locations) if locations else []

    def get(self, word: str) -> dict[str, tuple[int, ...]]:
        """Return a sorted copy of the location map for ``word`` (empty if absent)."""
        with self._read_word(word) as locations:
            if not locations:
                return {}
            return {location: tuple(sorted(locations[location])) for location in sorted(locations)}

    def get_positions(self, word: str, location: str) -> tuple[int, ...]:
        with self._read_word(word) as locations:
            if not locations:
                return ()
            return tuple(sorted(locations.get(location, ())))

    def words_starting_with(self, prefix: str) -> list[str]:
        """Return index words that begin with ``prefix``, in sorted order."""
        words = self._word_snapshot()
        matched: list[str] = []
        for word in words[bisect_left(words, prefix) :]:
            if not word.startswith(prefix):
                break
            matched.append(word)
        return matched

    def location_word_counts(self) -> dict[str, int]:
        """Total number of indexed positions per location, sorted by location."""
        totals: dict[str, int] = {}
        for word in self._word_snapshot():
            with self._read_word(word) as locations:
                if not locations:
                    continue
                for location, positions in locations.items():
                    totals[location] = totals.get(location, 0) + len(positions)
        return dict(sorted(totals.items()))

    def to_dict(self) -> dict[str, dict[str, list[int]]]:
        """Nested plain copy of the index for JSON export."""
        return {word: {loc: list(pos) for loc, pos in self.get(word).items()} for word in self._word_snapshot()}

    def __str__(self) -> str:
        return str(self.to_dict())

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def exact_search(
        self,
        queries: Iterable[str],
        counts: Mapping[str, int] | None = None,
    ) -> list[SearchResult]:
        """Rank locations containing any of the query words exactly."""
        return self._search_words(sorted(set(queries)), counts)

    def partial_search(
        self,
        queries: Iterable[str],
        counts: Mapping[str, int] | None = None,
    ) -> list[SearchResult]:
        """Rank locations containing any word that starts with a query word.

        A word matched by more than one query term is only counted once.
        """
        matched: set[str] = set()
        for query in set(queries):
            matched.update(self.words_starting_with(query))
        return self._search_words(sorted(matched), counts)

    def search(
        self,
        queries: Iterable[str],
        exact: bool,
        counts: Mapping[str, int] | None = None,
    ) -> list[SearchResult]:
        if exact:
            return self.exact_search(queries, counts)
        return self.partial_search(queries, counts)

    def _search_words(self, words: Iterable[str], counts: Mapping[str, int] | None) -> list[SearchResult]:
        results: dict[str, SearchResult] = {}
        for word in words:
            with self._read_word(word) as locations:
                if not locations:
                    continue
                hits = [(location, len(positions)) for location, positions in locations.items()]

            for location, matches in hits:
                result = results.get(location)
                if result is None:
                    if counts is None:
                        counts = self.location_word_counts()
                    result = SearchResult(location=location, words=counts.get(location, 0))
                    results[location] = result
                result.add_matches(matches)

        return sorted(results.values(), key=SearchResult.sort_key)
