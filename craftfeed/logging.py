"""Logging configuration for the feed service."""

import json
import logging
import sys
from datetime import datetime, timezone

from craftfeed.config import get_settings

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

# Chatty third-party loggers held at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def context_fields(record: logging.LogRecord) -> dict:
    """Fields passed to a log call via ``extra=`` (feed_type, slug, ...)."""
    return {k: v for k, v in vars(record).items() if k not in _RESERVED}


class JsonFormatter(logging.Formatter):
    """One JSON object per line for production log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including extra context and tracebacks."""
        base = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        base.update(context_fields(record))
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, default=str)


class ContextFormatter(logging.Formatter):
    """Human-readable formatter that appends extra context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = context_fields(record)
        if not fields:
            return line
        first, sep, rest = line.partition("\n")
        context = " ".join(f"{k}={v}" for k, v in sorted(fields.items()))
        return f"{first} [{context}]{sep}{rest}"


def setup_logging() -> None:
    """Configure logging based on environment."""
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)

    if settings.env == "prod":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            ContextFormatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
