"""Pretty JSON export of the index, location counts and query results.

Output is tab-indented with one key per line; nested objects mirror the
in-memory structures one-to-one and keys are written in sorted order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import json
import logging
from pathlib import Path
from typing import Any

from memsearch.search.index import InvertedIndex
from memsearch.search.models import SearchResult


logger = logging.getLogger(__name__)


def dumps(payload: Any) -> str:
    return json.dumps(payload, indent="\t", ensure_ascii=False)


def write_json(payload: Any, path: Path) -> None:
    """Write ``payload`` to ``path`` as tab-indented UTF-8 JSON.

    Raises:
        OSError: If the file cannot be written
    """
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(payload) + "\n", encoding="utf-8")
    logger.info(f"Wrote {path}")


def index_payload(index: InvertedIndex) -> dict[str, dict[str, list[int]]]:
    return index.to_dict()


def results_payload(results: Mapping[str, Sequence[SearchResult]]) -> dict[str, list[dict[str, object]]]:
    return {key: [result.to_dict() for result in results[key]] for key in sorted(results)}


def write_index(index: InvertedIndex, path: Path) -> None:
    write_json(index_payload(index), path)


def write_counts(index: InvertedIndex, path: Path) -> None:
    write_json(index.location_word_counts(), path)


def write_results(results: Mapping[str, Sequence[SearchResult]], path: Path) -> None:
    write_json(results_payload(results), path)
