"""Centralized configuration for memsearch using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from ``MEMSEARCH_*`` environment variables.

    Command-line flags take precedence over these values; the settings only
    provide defaults for the indexing, crawling and logging knobs.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Work queue
    threads: int = Field(default=5, ge=1, description="Worker threads used by the multithreaded pipeline")

    # Crawler settings
    crawl_limit: int = Field(default=50, ge=1, description="Maximum number of pages fetched per crawl")
    max_redirects: int = Field(default=3, ge=0, description="Redirects followed per fetch")
    http_timeout: float = Field(default=10.0, gt=0, description="HTTP request timeout in seconds")
    user_agent: str = Field(default="memsearch/1.0", description="User-Agent header sent by the crawler")

    # File indexing
    text_extensions: str = Field(
        default=".txt,.text",
        description="Comma-separated file suffixes treated as text when walking a directory",
    )

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit structured JSON logs")

    def get_text_extensions(self) -> tuple[str, ...]:
        """Lowercased suffixes, each with a leading dot."""
        extensions = []
        for raw in self.text_extensions.split(","):
            suffix = raw.strip().lower()
            if not suffix:
                continue
            extensions.append(suffix if suffix.startswith(".") else f".{suffix}")
        return tuple(extensions)
