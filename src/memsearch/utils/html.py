"""HTML helpers: markup stripping and link extraction."""

from __future__ import annotations

import logging
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Comment


logger = logging.getLogger(__name__)

# Elements whose contents are never part of the visible text
_INVISIBLE_TAGS = ["head", "style", "script", "noscript", "svg", "template"]


def strip_html(html: str) -> str:
    """Return the visible text of ``html`` with tags, comments and scripts removed."""

    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    for element in soup.find_all(_INVISIBLE_TAGS):
        element.decompose()
    return soup.get_text(" ")


def normalize_link(base_url: str, href: str) -> str | None:
    """Resolve ``href`` against ``base_url`` and drop the fragment.

    Returns:
        Absolute http(s) URL, or None for other schemes and unparsable links
    """
    try:
        absolute, _fragment = urldefrag(urljoin(base_url, href.strip()))
        parsed = urlparse(absolute)
    except ValueError:
        logger.debug(f"Skipping unparsable link {href!r} on {base_url}")
        return None

    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return absolute


def extract_links(base_url: str, html: str) -> list[str]:
    """Extract absolute ``<a href>`` links in document order, without duplicates.

    Args:
        base_url: URL the HTML was fetched from (after redirects)
        html: HTML content

    Returns:
        List of absolute URLs
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    base_tag = soup.find("base", href=True)
    if base_tag is not None:
        base_url = urljoin(base_url, str(base_tag["href"]))

    links: list[str] = []
    seen: set[str] = set()
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        # BeautifulSoup can return list for attribute values, ensure it's a string
        if isinstance(href, list):
            href = href[0] if href else ""
        link = normalize_link(base_url, str(href))
        if link and link not in seen:
            seen.add(link)
            links.append(link)
    return links
