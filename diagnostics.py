"""Request-scoped diagnostic trace returned alongside scrape results."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

__all__ = ["DiagnosticLog", "STEP", "OK", "WARN", "ERROR"]

STEP = "➡️"
OK = "✅"
WARN = "⚠️"
ERROR = "❌"

_LEVELS = {
    STEP: logging.INFO,
    OK: logging.INFO,
    WARN: logging.WARNING,
    ERROR: logging.ERROR,
}


class DiagnosticLog:
    """Append-only list of human readable trace lines for one scrape.

    Every line is prefixed with a severity glyph and also forwarded to
    ``logger`` so server logs carry the same trace.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._lines: List[str] = []
        self._logger = logger or logging.getLogger(__name__)

    def _add(self, glyph: str, message: str) -> None:
        line = f"{glyph} {message}"
        self._lines.append(line)
        self._logger.log(_LEVELS[glyph], line)

    def step(self, message: str) -> None:
        self._add(STEP, message)

    def ok(self, message: str) -> None:
        self._add(OK, message)

    def warn(self, message: str) -> None:
        self._add(WARN, message)

    def error(self, message: str) -> None:
        self._add(ERROR, message)

    def child(self) -> "DiagnosticLog":
        """Return an empty log sharing this log's logger."""
        return DiagnosticLog(self._logger)

    def extend(self, lines: Iterable[str]) -> None:
        """Append already formatted lines (e.g. a merged child log)."""
        self._lines.extend(lines)

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
