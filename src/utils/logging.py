"""
Logging for benchmark runs, the CLI and the HTTP API.

The orchestrator logs each strategy run with structured `extra=` fields
(strategy, limit, queries, elapsed_ms). With JSON output enabled those fields
become top-level keys, so a run can be filtered per strategy with jq.

Usage:
    from src.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    log = get_logger(__name__)
    log.info("strategy finished", extra={"strategy": "naive", "queries": 21})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

# Attributes present on every LogRecord; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}


def _json_formatter(record: logging.LogRecord) -> str:
    """One JSON object per record, `extra=` fields flattened in."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    for key, value in vars(record).items():
        if key not in _RESERVED_ATTRS and key not in payload:
            payload[key] = value
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update(nested)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """dictConfig-compatible wrapper around `_json_formatter`."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


_CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
) -> None:
    """
    Route every benchmark logger through one stderr handler.

    The CLI commands and `nplusone serve` call this with `LOG_LEVEL` and
    `LOG_JSON` from the settings. The console format prints the message only;
    the `extra=` fields of strategy runs appear in JSON output.

    Parameters
    ----------
    level : str
        Level name applied to the root logger and the handler.
    json_logs : bool
        Emit one JSON object per record instead of the pipe-separated line.
    """
    formatter = "json" if json_logs else "console"
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {"format": _CONSOLE_FORMAT, "datefmt": "%H:%M:%S"},
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter,
                    "level": level,
                }
            },
            "root": {"handlers": ["stderr"], "level": level},
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Module loggers propagate to the root handler set up above."""
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
