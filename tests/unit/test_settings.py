"""Tests for environment-driven settings."""

from pydantic import ValidationError
import pytest

from memsearch.config import Settings


pytestmark = pytest.mark.unit


class TestSettings:
    def test_reads_test_environment(self):
        settings = Settings()

        assert settings.threads == 4
        assert settings.crawl_limit == 50
        assert settings.http_timeout == 5.0
        assert settings.user_agent == "memsearch-tests/1.0"
        assert settings.json_logs is False

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("MEMSEARCH_THREADS", "MEMSEARCH_MAX_REDIRECTS", "MEMSEARCH_USER_AGENT"):
            monkeypatch.delenv(name)

        settings = Settings()

        assert settings.threads == 5
        assert settings.max_redirects == 3
        assert settings.user_agent == "memsearch/1.0"

    def test_env_file_is_read(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MEMSEARCH_CRAWL_LIMIT")
        (tmp_path / ".env").write_text("MEMSEARCH_CRAWL_LIMIT=7\n", encoding="utf-8")

        assert Settings().crawl_limit == 7

    @pytest.mark.parametrize(
        ("name", "value"),
        [("MEMSEARCH_THREADS", "0"), ("MEMSEARCH_CRAWL_LIMIT", "-1"), ("MEMSEARCH_HTTP_TIMEOUT", "0")],
    )
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings()

    def test_text_extensions_are_normalized(self, monkeypatch):
        monkeypatch.setenv("MEMSEARCH_TEXT_EXTENSIONS", " TXT, .Text ,,md")

        assert Settings().get_text_extensions() == (".txt", ".text", ".md")
