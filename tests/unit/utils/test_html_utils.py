"""Tests for HTML stripping and link extraction."""

import pytest

from memsearch.utils.html import extract_links, normalize_link, strip_html


pytestmark = pytest.mark.unit


PAGE = """<!DOCTYPE html>
<html>
<head><title>Ignored title</title><style>body { color: red; }</style></head>
<body>
  <!-- hidden comment -->
  <h1>Hello&nbsp;World</h1>
  <script>var secret = "script text";</script>
  <p>Visible <b>bold</b> text &amp; more.</p>
  <a href="/docs/intro.html#section">Intro</a>
  <a href="guide.html">Guide</a>
  <a href="https://other.example.org/page">Other</a>
  <a href="/docs/intro.html">Intro again</a>
  <a href="mailto:someone@example.com">Mail</a>
  <a href="javascript:void(0)">JS</a>
  <a name="anchor-only">No href</a>
  <link href="/style.css" rel="stylesheet">
</body>
</html>
"""


class TestStripHtml:
    def test_keeps_visible_text(self):
        text = strip_html(PAGE)

        assert "Hello" in text
        assert "World" in text
        assert "Visible" in text
        assert "bold" in text
        assert "& more." in text

    def test_drops_scripts_styles_comments_and_head(self):
        text = strip_html(PAGE)

        assert "script text" not in text
        assert "color: red" not in text
        assert "hidden comment" not in text
        assert "Ignored title" not in text

    def test_separates_adjacent_elements(self):
        assert strip_html("<p>one</p><p>two</p>").split() == ["one", "two"]

    def test_empty_input(self):
        assert strip_html("") == ""


class TestNormalizeLink:
    def test_resolves_relative_and_drops_fragment(self):
        assert normalize_link("https://example.com/a/b.html", "../c.html#top") == "https://example.com/c.html"

    def test_keeps_query(self):
        assert normalize_link("https://example.com/", "/search?q=1") == "https://example.com/search?q=1"

    @pytest.mark.parametrize("href", ["mailto:x@example.com", "javascript:void(0)", "ftp://example.com/f"])
    def test_rejects_non_http_schemes(self, href):
        assert normalize_link("https://example.com/", href) is None

    def test_rejects_relative_seed(self):
        assert normalize_link("not a url", "not a url") is None


class TestExtractLinks:
    def test_anchor_links_in_document_order_without_duplicates(self):
        links = extract_links("https://example.com/docs/index.html", PAGE)

        assert links == [
            "https://example.com/docs/intro.html",
            "https://example.com/docs/guide.html",
            "https://other.example.org/page",
        ]

    def test_base_tag_changes_resolution(self):
        html = '<html><head><base href="https://cdn.example.com/root/"></head><body><a href="x.html">x</a></body></html>'

        assert extract_links("https://example.com/", html) == ["https://cdn.example.com/root/x.html"]

    def test_no_links(self):
        assert extract_links("https://example.com/", "<p>nothing here</p>") == []
        assert extract_links("https://example.com/", "") == []
