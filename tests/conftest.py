"""Shared test fixtures and configuration."""

import os

import pytest


# Complete test environment that overrides ALL memsearch config values
TEST_ENV = {
    "MEMSEARCH_THREADS": "4",
    "MEMSEARCH_CRAWL_LIMIT": "50",
    "MEMSEARCH_MAX_REDIRECTS": "3",
    "MEMSEARCH_HTTP_TIMEOUT": "5",
    "MEMSEARCH_USER_AGENT": "memsearch-tests/1.0",
    "MEMSEARCH_TEXT_EXTENSIONS": ".txt,.text",
    "MEMSEARCH_LOG_LEVEL": "info",
    "MEMSEARCH_JSON_LOGS": "false",
    # Proxy settings - ensure they're cleared for tests
    "http_proxy": "",
    "https_proxy": "",
    "all_proxy": "",
    "no_proxy": "",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Reset memsearch environment variables and keep .env lookups out of the repo."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def text_tree(tmp_path):
    """Small directory of text documents with one nested folder and one ignored file."""
    root = tmp_path / "docs"
    (root / "nested").mkdir(parents=True)
    (root / "a.txt").write_text("Computer computers science", encoding="utf-8")
    (root / "b.text").write_text("The science of cats. Cats!", encoding="utf-8")
    (root / "nested" / "c.TXT").write_text("computing 42 dogs_and cats", encoding="utf-8")
    (root / "notes.md").write_text("computer science", encoding="utf-8")
    return root
