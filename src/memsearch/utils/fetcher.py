"""Blocking HTML fetcher built on httpx with a bounded redirect budget."""

from __future__ import annotations

from dataclasses import dataclass
import logging

import httpx


logger = logging.getLogger(__name__)

DEFAULT_MAX_REDIRECTS = 3
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a successful fetch."""

    url: str
    final_url: str
    status_code: int
    html: str


class HtmlFetcher:
    """Fetch HTML pages, following at most ``max_redirects`` redirects.

    Only ``200`` responses with an HTML content type produce a result; every
    other outcome (error status, non-HTML body, timeout, transport error, too
    many redirects) is logged and reported as ``None``.
    """

    def __init__(
        self,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = "memsearch/1.0",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0, got {max_redirects}")
        self.max_redirects = max_redirects
        self.client = httpx.Client(
            transport=transport,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            headers={
                "User-Agent": user_agent,
                "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
            },
            follow_redirects=True,
            max_redirects=max_redirects,
        )

    def __enter__(self) -> HtmlFetcher:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        self.client.close()

    def fetch(self, url: str) -> FetchResult | None:
        try:
            response = self.client.get(url)
        except httpx.TooManyRedirects:
            logger.warning(f"Too many redirects (> {self.max_redirects}) for {url}")
            return None
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch {url}: {e}")
            return None

        if response.status_code != 200:
            logger.warning(f"Skipping {url}: HTTP {response.status_code}")
            return None

        content_type = response.headers.get("content-type", "")
        if "html" not in content_type.lower():
            logger.debug(f"Skipping {url}: non-HTML content type {content_type!r}")
            return None

        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            html=response.text,
        )

    def fetch_html(self, url: str) -> str | None:
        result = self.fetch(url)
        return result.html if result else None
