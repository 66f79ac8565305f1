"""Shared configuration constants for the application."""

from __future__ import annotations

import os
from typing import Tuple


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off", ""}


DEFAULT_TIMEOUT = int(os.getenv("SCRAPER_TIMEOUT", "10"))
MAX_WORKERS = max(1, int(os.getenv("SCRAPER_MAX_WORKERS", "4")))
ENABLE_DIAGNOSTICS = _env_flag("SCRAPER_DIAGNOSTICS", True)
PORT = int(os.getenv("PORT", "5000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

# Markup of the target site.
INFO_SELECTOR = "p.info"
NAME_SELECTOR = "p.info b"
BRAND_SUBSTRING = "filmyzilla"
SERVER_PATH = "/server/"
START_DOWNLOAD_TEXT = "Start Download Now"

# Evaluated in order, first match wins.
QUALITY_RULES: Tuple[Tuple[str, str], ...] = (
    ("1080", "1080p"),
    ("720", "720p"),
    ("480", "480p"),
)
UNKNOWN_QUALITY = "unknown"

_EXPORTED_NAMES = (
    "DEFAULT_TIMEOUT",
    "MAX_WORKERS",
    "ENABLE_DIAGNOSTICS",
    "PORT",
    "LOG_LEVEL",
    "USER_AGENT",
    "INFO_SELECTOR",
    "NAME_SELECTOR",
    "BRAND_SUBSTRING",
    "SERVER_PATH",
    "START_DOWNLOAD_TEXT",
    "QUALITY_RULES",
    "UNKNOWN_QUALITY",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
