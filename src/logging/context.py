# src/logging/context.py - v3
"""Per-run logging context: document, run, target language and step.

The engine sets these once per run and once per language; formatters read
them back so every record of a run carries the same identifiers without
threading them through call signatures.
"""

from __future__ import annotations

import contextvars
from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class LogContext:
    document_id: str | None = None
    run_id: str | None = None
    language: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Non-None fields only."""
        return {k: v for k, v in asdict(self).items() if v is not None}


_EMPTY = LogContext()
_current: contextvars.ContextVar[LogContext] = contextvars.ContextVar(
    "tabilingo_log_context", default=_EMPTY
)


def get_context() -> LogContext:
    return _current.get()


def set_document_context(document_id: str, run_id: str) -> None:
    """Start a run: replaces any previous context."""
    _current.set(LogContext(document_id=document_id, run_id=run_id))


def set_language_context(language: str | None, step: str | None = None) -> None:
    """Switch target language within the current run; None leaves the loop."""
    _current.set(replace(_current.get(), language=language, step=step))


def clear_context() -> None:
    _current.set(_EMPTY)
