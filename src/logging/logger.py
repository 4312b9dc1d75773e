# src/logging/logger.py - v3
"""Logger setup for the tabilingo namespace.

Two output formats share the same inputs: the record, the run context from
`tabilingo.logging.context`, and structured fields passed as
`extra={"data": {...}}`.

    {"timestamp": "...", "level": "INFO", "logger": "tabilingo.engine...",
     "message": "Translation completed", "context": {"document_id": "...",
     "run_id": "...", "language": "fr", "step": "translate"},
     "data": {"used_cache": false, "characters": 412}}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from tabilingo.logging.context import get_context

ROOT_LOGGER = "tabilingo"
_NOISY_LIBRARIES = ("httpx", "httpcore")


class _ContextFormatter(logging.Formatter):
    @staticmethod
    def _timestamp(record: logging.LogRecord) -> datetime:
        return datetime.fromtimestamp(record.created, tz=timezone.utc)

    @staticmethod
    def _data(record: logging.LogRecord) -> dict[str, Any] | None:
        data = getattr(record, "data", None)
        return data or None

    @staticmethod
    def _dumps(value: Any) -> str:
        return json.dumps(value, default=str, ensure_ascii=False)


class JsonFormatter(_ContextFormatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": self._timestamp(record).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = get_context().as_dict()
        if context:
            entry["context"] = context
        data = self._data(record)
        if data:
            entry["data"] = data
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return self._dumps(entry)


class TextFormatter(_ContextFormatter):
    """`2026-05-01 10:00:00 [INFO    ] name <doc> [fr] (translate) - message {data}`"""

    def format(self, record: logging.LogRecord) -> str:
        ctx = get_context()
        line = [
            self._timestamp(record).strftime("%Y-%m-%d %H:%M:%S"),
            f"[{record.levelname:8s}]",
            record.name,
        ]
        if ctx.document_id:
            line.append(f"<{ctx.document_id}>")
        if ctx.language:
            line.append(f"[{ctx.language}]")
        if ctx.step:
            line.append(f"({ctx.step})")
        line.append(f"- {record.getMessage()}")
        data = self._data(record)
        if data:
            line.append(self._dumps(data))
        text = " ".join(line)
        if record.exc_info and record.exc_info[1] is not None:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    rotation: str = "10MB",
    retention: int = 30,
) -> None:
    """(Re)configure the `tabilingo` logger. Safe to call more than once.

    Console output goes to stderr; stdout is left to command output.

    Args:
        level: DEBUG, INFO, WARNING or ERROR.
        log_format: "json" or "text".
        log_file: Optional file, rotated by size.
        rotation: Max file size before rotation (e.g. "10MB").
        retention: Number of rotated files to keep.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        from tabilingo.logging.handlers import create_rotating_handler

        handlers.append(create_rotating_handler(log_file, rotation=rotation, retention=retention))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
