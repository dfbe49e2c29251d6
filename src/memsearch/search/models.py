"""Result models shared by the index and the query engine."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


_SCORE_QUANTUM = Decimal("0.000001")


def format_score(raw_score: float) -> str:
    """Round a raw score half-up to six decimal digits."""

    return str(Decimal(repr(raw_score)).quantize(_SCORE_QUANTUM, rounding=ROUND_HALF_UP))


@dataclass(slots=True)
class SearchResult:
    """One location matched by a query.

    ``matches`` grows as further query terms are folded in; ``words`` is the
    total number of indexed positions at the location and never changes.
    """

    location: str
    words: int
    matches: int = 0

    def add_matches(self, count: int) -> None:
        self.matches += count

    @property
    def raw_score(self) -> float:
        if self.words <= 0:
            return 0.0
        return self.matches / self.words

    @property
    def score(self) -> str:
        return format_score(self.raw_score)

    def sort_key(self) -> tuple[float, int, str, str]:
        """Key that sorts best results first.

        Higher raw score first, then more words, then case-insensitive
        location, with the exact location as the final tie-break.
        """
        return (-self.raw_score, -self.words, self.location.lower(), self.location)

    def __lt__(self, other: SearchResult) -> bool:
        if not isinstance(other, SearchResult):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def to_dict(self) -> dict[str, object]:
        return {
            "where": self.location,
            "count": self.matches,
            "score": self.score,
        }

    def __str__(self) -> str:
        return f"Location: {self.location} Score: {self.score} Matches: {self.matches} Words: {self.words}"
