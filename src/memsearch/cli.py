"""Command-line entry point: build an index from files or the web, then search it."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

from memsearch.config import Settings
from memsearch.observability.logging import configure_logging
from memsearch.search.concurrent_index import ConcurrentInvertedIndex
from memsearch.search.file_indexer import ConcurrentFileIndexer, FileIndexer
from memsearch.search.index import InvertedIndex
from memsearch.search.json_writer import write_counts, write_index, write_results
from memsearch.search.query import ConcurrentQueryEngine, QueryEngine
from memsearch.utils.crawler import CrawlConfig, WebCrawler
from memsearch.utils.work_queue import WorkQueue


logger = logging.getLogger(__name__)

DEFAULT_INDEX_PATH = Path("index.json")
DEFAULT_COUNTS_PATH = Path("counts.json")
DEFAULT_RESULTS_PATH = Path("results.json")


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {parsed}")
    return parsed


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {parsed}")
    return parsed


def build_argument_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memsearch",
        description="Build an in-memory inverted index from text files or a web crawl and search it",
    )
    parser.add_argument("--path", type=Path, help="Text file or directory to index")
    parser.add_argument("--url", help="Seed URL to crawl (enables the multithreaded pipeline)")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=settings.crawl_limit,
        help=f"Maximum pages fetched by the crawler (default: {settings.crawl_limit})",
    )
    parser.add_argument(
        "--redirects",
        type=_non_negative_int,
        default=settings.max_redirects,
        help=f"Redirects followed per fetch (default: {settings.max_redirects})",
    )
    parser.add_argument(
        "--threads",
        type=_positive_int,
        nargs="?",
        const=settings.threads,
        help=f"Use the multithreaded pipeline with this many workers (default: {settings.threads})",
    )
    parser.add_argument("--query", type=Path, help="Query file, one query per line")
    parser.add_argument("--exact", action="store_true", help="Exact instead of prefix matching")
    parser.add_argument(
        "--index",
        type=Path,
        nargs="?",
        const=DEFAULT_INDEX_PATH,
        help=f"Write the index as JSON (default path: {DEFAULT_INDEX_PATH})",
    )
    parser.add_argument(
        "--counts",
        type=Path,
        nargs="?",
        const=DEFAULT_COUNTS_PATH,
        help=f"Write per-location word counts as JSON (default path: {DEFAULT_COUNTS_PATH})",
    )
    parser.add_argument(
        "--results",
        type=Path,
        nargs="?",
        const=DEFAULT_RESULTS_PATH,
        help=f"Write search results as JSON (default path: {DEFAULT_RESULTS_PATH})",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=settings.json_logs,
        help="Emit structured JSON logs",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    settings = Settings()
    parser = build_argument_parser(settings)
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.json_logs)

    multithreaded = args.threads is not None or args.url is not None
    threads = args.threads or settings.threads
    index: InvertedIndex = ConcurrentInvertedIndex() if multithreaded else InvertedIndex()
    queue = WorkQueue(threads, name="memsearch") if multithreaded else None
    engine: QueryEngine | None = None

    try:
        if args.url:
            crawler = WebCrawler(
                index,  # type: ignore[arg-type]
                CrawlConfig(
                    max_pages=args.limit,
                    max_redirects=args.redirects,
                    timeout=settings.http_timeout,
                    user_agent=settings.user_agent,
                ),
                queue=queue,
            )
            crawler.crawl(args.url)

        if args.path:
            extensions = settings.get_text_extensions()
            if queue is not None:
                indexer: FileIndexer = ConcurrentFileIndexer(index, queue=queue, extensions=extensions)  # type: ignore[arg-type]
            else:
                indexer = FileIndexer(index, extensions=extensions)
            indexer.index_path(args.path)

        if args.query:
            if queue is not None:
                engine = ConcurrentQueryEngine(index, queue=queue)
            else:
                engine = QueryEngine(index)
            engine.parse_file(args.query, args.exact)
    finally:
        if queue is not None:
            queue.finish()
            queue.shutdown()

    if args.index is not None:
        _export("index", lambda: write_index(index, args.index))
    if args.counts is not None:
        _export("counts", lambda: write_counts(index, args.counts))
    if args.results is not None:
        results = engine.results if engine is not None else {}
        _export("results", lambda: write_results(results, args.results))

    return 0


def _export(name: str, write) -> None:
    try:
        write()
    except OSError as e:
        logger.error(f"Unable to write {name} JSON: {e}")


if __name__ == "__main__":
    sys.exit(main())
