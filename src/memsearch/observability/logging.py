"""Log formatting and root logger setup for the indexing and crawl pipelines.

Worker threads log heavily, so every entry carries the thread name. JSON
entries also carry the trace and span ids of the span that is active on the
logging thread.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from memsearch.observability.context import get_trace_context


PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(threadName)s] %(message)s"

# Third-party loggers that are chatty at INFO (one line per request)
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with trace correlation and ``extra=`` fields."""

    REDACT_KEYS = frozenset({"authorization", "cookie", "password", "secret", "token"})
    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500
    _RESERVED = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_trace_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rsplit(".", 1)[-1],
            "thread": record.threadName,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(self._extra_fields(record))
        return orjson.dumps(entry, default=self._encode).decode("utf-8")

    def _extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        for key, value in record.__dict__.items():
            if key in self._RESERVED or key.startswith("_"):
                continue
            if key.lower() in self.REDACT_KEYS:
                fields[key] = "[REDACTED]"
            elif isinstance(value, str):
                fields[key] = _clip(value, self.MAX_FIELD_LEN)
            else:
                fields[key] = value
        return fields

    @staticmethod
    def _encode(value: Any) -> Any:
        # Sets of words or URLs are common extras; keep their output stable.
        if isinstance(value, (set, frozenset)):
            return sorted(value, key=str)
        if isinstance(value, Path):
            return str(value)
        return repr(value)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Replace the root logger's handlers with a single stdout handler.

    Args:
        level: Root level name, case-insensitive; unknown names mean INFO
        json_output: Use :class:`JsonFormatter` instead of the plain format
        logger_levels: Per-logger level overrides (logger name -> level name)
    """
    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_resolve_level(name_level))


def _resolve_level(name: str) -> int:
    resolved = logging.getLevelName(name.upper())
    return resolved if isinstance(resolved, int) else logging.INFO
