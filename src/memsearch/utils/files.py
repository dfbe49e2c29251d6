"""Filesystem traversal for text documents."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import logging
import os
from pathlib import Path


logger = logging.getLogger(__name__)

DEFAULT_TEXT_EXTENSIONS: tuple[str, ...] = (".txt", ".text")


def is_text_file(path: Path, extensions: Sequence[str] = DEFAULT_TEXT_EXTENSIONS) -> bool:
    return path.suffix.lower() in extensions


def iter_text_files(root: Path, extensions: Sequence[str] = DEFAULT_TEXT_EXTENSIONS) -> Iterator[Path]:
    """Yield text files under ``root`` in sorted, depth-first order.

    A ``root`` that is itself a file is yielded as-is regardless of its
    suffix. Unreadable directories are logged and skipped.
    """
    if root.is_file():
        yield root
        return

    if not root.is_dir():
        logger.warning(f"Skipping {root}: not a file or directory")
        return

    def _on_error(error: OSError) -> None:
        logger.warning(f"Cannot read directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames.sort()
        base = Path(dirpath)
        for filename in sorted(filenames):
            candidate = base / filename
            if is_text_file(candidate, extensions) and candidate.is_file():
                yield candidate
