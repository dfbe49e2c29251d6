"""Analyzer utilities for turning raw text into index terms.

The analyzers follow a composable tokenizer/filter design: a tokenizer emits
:class:`Token` objects and each filter transforms the stream. The default
pipeline cleans text down to letters and whitespace, lowercases it and applies
the Snowball English stemmer, so that documents and queries always agree on
the terms they produce.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, MutableMapping
from dataclasses import dataclass, field
import re
from typing import Any, Protocol
import unicodedata

from nltk.stem.snowball import SnowballStemmer


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class Analyzer(Protocol):
    """Protocol implemented by analyzers."""

    def __call__(self, text: str) -> list[Token]:  # pragma: no cover - interface definition
        ...


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


_SPLIT_PATTERN = re.compile(r"\s+", re.UNICODE)


def clean(text: str) -> str:
    """Decompose accents and drop every character that is not a letter or whitespace."""

    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if ch.isalpha() or ch.isspace()).lower()


def split(text: str) -> list[str]:
    stripped = text.strip()
    if not stripped:
        return []
    return _SPLIT_PATTERN.split(stripped)


def parse(text: str) -> list[str]:
    """Clean then split text into lowercase words."""

    return split(clean(text))


class CleaningTokenizer:
    """Tokenizer that cleans the input and splits it on whitespace."""

    def __call__(self, text: str) -> Iterator[Token]:
        for position, word in enumerate(parse(text)):
            yield Token(text=word, position=position)


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.text.islower():
                yield token
            else:
                yield token.copy_with(text=token.text.lower())


class SnowballStemFilter:
    """Applies the Snowball stemmer and drops tokens that stem to nothing."""

    def __init__(self, language: str = "english") -> None:
        self._stemmer = SnowballStemmer(language)

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            stemmed = self._stemmer.stem(token.text)
            if stemmed:
                yield token.copy_with(text=stemmed)


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Iterable[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class StandardAnalyzer:
    """Default analyzer used for documents and queries."""

    def __init__(self, *, apply_stemming: bool = True) -> None:
        filters: list[TokenFilter] = [LowercaseFilter()]
        if apply_stemming:
            filters.append(SnowballStemFilter())
        self.pipeline = AnalyzerPipeline(CleaningTokenizer(), filters)

    def __call__(self, text: str) -> list[Token]:
        return self.pipeline(text)


_ANALYZER_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "default": lambda: StandardAnalyzer(),
    "english": lambda: StandardAnalyzer(),
    "english-nostem": lambda: StandardAnalyzer(apply_stemming=False),
}


def get_analyzer(name: str | None) -> Analyzer:
    """Return analyzer by name, defaulting to the standard analyzer."""

    if name is None:
        return _ANALYZER_FACTORIES["default"]()
    normalized = name.lower()
    if normalized not in _ANALYZER_FACTORIES:
        msg = f"Unknown analyzer '{name}'. Available: {sorted(_ANALYZER_FACTORIES)}"
        raise ValueError(msg)
    return _ANALYZER_FACTORIES[normalized]()


def stem_text(text: str, analyzer: Analyzer | None = None) -> list[str]:
    """Return the ordered list of stemmed terms for ``text``."""

    active = analyzer or get_analyzer(None)
    return [token.text for token in active(text)]


def stem_unique(text: str, analyzer: Analyzer | None = None) -> list[str]:
    """Return the sorted, de-duplicated stemmed terms for ``text``."""

    return sorted(set(stem_text(text, analyzer)))
