"""Bounded breadth-first web crawler that indexes pages in parallel.

The calling thread owns the frontier and performs every fetch, so the
seen-set and the pending queue need no locking. Each successfully fetched
page is handed to a :class:`WorkQueue` task that strips the markup, stems the
text and adds it to a :class:`ConcurrentInvertedIndex`. When :meth:`crawl`
returns, every fetched page has been indexed.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
import logging
import time

from memsearch.observability.metrics import DOCUMENTS_INDEXED, PAGES_FETCHED
from memsearch.observability.tracing import create_span
from memsearch.search.analyzers import get_analyzer, stem_text
from memsearch.search.concurrent_index import ConcurrentInvertedIndex
from memsearch.utils.fetcher import DEFAULT_MAX_REDIRECTS, DEFAULT_TIMEOUT, HtmlFetcher
from memsearch.utils.html import extract_links, normalize_link, strip_html
from memsearch.utils.work_queue import DEFAULT_THREADS, WorkQueue


logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 50


@dataclass
class CrawlConfig:
    """Configuration for crawler behavior."""

    max_pages: int = DEFAULT_MAX_PAGES
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = "memsearch/1.0"
    analyzer: str | None = None
    progress_interval: int = 10  # Report progress every N fetches

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")


@dataclass(frozen=True)
class FetchedPage:
    """Immutable page handed from the traversal thread to an index task."""

    url: str
    final_url: str
    html: str


@dataclass
class CrawlStats:
    """Counters for one crawl. ``fetched`` counts every attempt against the budget."""

    fetched: int = 0
    succeeded: int = 0
    failed: int = 0
    urls: list[str] = field(default_factory=list)


class IndexPageTask:
    """Work queue task that indexes one fetched page."""

    def __init__(self, page: FetchedPage, index: ConcurrentInvertedIndex, analyzer: str | None = None) -> None:
        self.page = page
        self.index = index
        self.analyzer = analyzer

    def __call__(self) -> int:
        text = strip_html(self.page.html)
        words = stem_text(text, get_analyzer(self.analyzer))
        added = self.index.add_all(words, self.page.url, start=1)
        DOCUMENTS_INDEXED.labels(source="web").inc()
        logger.debug(f"Indexed {added} words from {self.page.url}")
        return added

    def __repr__(self) -> str:
        return f"IndexPageTask({self.page.url!r})"


class WebCrawler:
    """Breadth-first crawler bounded by a total page budget.

    Features:
    - Deque-based frontier holding fetched pages (no second fetch to expand a page)
    - Set-based de-duplication: a URL is fetched at most once per crawl
    - Every fetch attempt counts against ``max_pages``, failed ones included
    - Indexing runs on the work queue while the next pages are fetched
    """

    def __init__(
        self,
        index: ConcurrentInvertedIndex,
        crawl_config: CrawlConfig | None = None,
        *,
        queue: WorkQueue | None = None,
        threads: int = DEFAULT_THREADS,
        fetcher: HtmlFetcher | None = None,
    ) -> None:
        """Initialize crawler.

        Args:
            index: Thread-safe index that receives the crawled pages
            crawl_config: Optional crawler configuration
            queue: Work queue to dispatch index tasks on; when omitted the
                crawler creates one with ``threads`` workers and shuts it
                down at the end of each crawl
            threads: Worker count for an owned work queue
            fetcher: Optional fetcher, mainly for tests
        """
        self.index = index
        self.config = crawl_config or CrawlConfig()
        self._queue = queue
        self._threads = threads
        self._fetcher = fetcher

        self.seen: set[str] = set()
        self.frontier: deque[FetchedPage] = deque()
        self.stats = CrawlStats()

    def crawl(self, seed_url: str) -> CrawlStats:
        """Crawl from ``seed_url`` until the budget is spent or the frontier empties.

        Returns:
            Statistics for this crawl
        """
        self.seen.clear()
        self.frontier.clear()
        self.stats = CrawlStats()

        seed = normalize_link(seed_url, seed_url)
        if seed is None:
            logger.warning(f"Cannot crawl {seed_url!r}: not an absolute http(s) URL")
            return self.stats

        owns_queue = self._queue is None
        queue = self._queue or WorkQueue(self._threads, name="crawl")
        owns_fetcher = self._fetcher is None
        fetcher = self._fetcher or HtmlFetcher(
            max_redirects=self.config.max_redirects,
            timeout=self.config.timeout,
            user_agent=self.config.user_agent,
        )

        start_time = time.time()
        try:
            with create_span("crawl", attributes={"crawl.seed": seed, "crawl.max_pages": self.config.max_pages}):
                self._traverse(seed, fetcher, queue)
                queue.finish()
        finally:
            if owns_queue:
                queue.shutdown()
            if owns_fetcher:
                fetcher.close()

        self._log_completion(start_time)
        return self.stats

    def _traverse(self, seed: str, fetcher: HtmlFetcher, queue: WorkQueue) -> None:
        self._visit(seed, fetcher, queue)

        while self.frontier and not self._budget_spent():
            page = self.frontier.popleft()
            links = extract_links(page.final_url, page.html)
            if not links:
                logger.debug(f"No links found on {page.url}")
                continue

            for link in links:
                if self._budget_spent():
                    break
                if link in self.seen:
                    continue
                self._visit(link, fetcher, queue)

    def _visit(self, url: str, fetcher: HtmlFetcher, queue: WorkQueue) -> None:
        """Fetch ``url`` once; on success queue it for expansion and indexing."""
        self.seen.add(url)
        self.stats.fetched += 1

        result = fetcher.fetch(url)
        if result is None:
            self.stats.failed += 1
            PAGES_FETCHED.labels(status="failed").inc()
        else:
            self.stats.succeeded += 1
            self.stats.urls.append(url)
            PAGES_FETCHED.labels(status="ok").inc()

            page = FetchedPage(url=url, final_url=result.final_url, html=result.html)
            self.frontier.append(page)
            queue.execute(IndexPageTask(page, self.index, self.config.analyzer))

        if self.stats.fetched % self.config.progress_interval == 0:
            logger.info(
                f"Progress: {self.stats.fetched}/{self.config.max_pages} fetched, "
                f"{len(self.frontier)} in frontier, {len(self.seen)} seen"
            )

    def _budget_spent(self) -> bool:
        return self.stats.fetched >= self.config.max_pages

    def _log_completion(self, start_time: float) -> None:
        elapsed = time.time() - start_time
        rate = self.stats.fetched / elapsed if elapsed > 0 else 0
        logger.info(
            f"Crawl complete: {self.stats.succeeded} pages indexed, {self.stats.failed} failed "
            f"in {elapsed:.1f}s ({rate:.1f} pages/sec)"
        )
