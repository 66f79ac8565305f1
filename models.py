"""Data structures used across the application."""

from __future__ import annotations

from typing import Dict, List, Optional, TypedDict


class ScrapeRequest(TypedDict):
    """JSON body accepted by ``POST /api/scrape``."""

    url: str


class _QualityLinkBase(TypedDict):
    main_url: str


class QualityLink(_QualityLinkBase, total=False):
    """A download link for one quality label.

    ``redirect_url`` is only present once the redirect has been resolved.
    """

    redirect_url: str


class PageMetadata(TypedDict):
    """What the extractor reads from a movie page."""

    name: str
    image: Optional[str]
    links: Dict[str, QualityLink]


class ScrapeResult(PageMetadata, total=False):
    """Full response payload; ``logs`` is set when diagnostics are enabled."""

    logs: List[str]


__all__ = ["ScrapeRequest", "QualityLink", "PageMetadata", "ScrapeResult"]
