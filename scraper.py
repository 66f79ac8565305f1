"""Scrape a movie page and resolve its per-quality download links."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from constants import (
    BRAND_SUBSTRING,
    DEFAULT_TIMEOUT,
    INFO_SELECTOR,
    MAX_WORKERS,
    NAME_SELECTOR,
    QUALITY_RULES,
    SERVER_PATH,
    START_DOWNLOAD_TEXT,
    UNKNOWN_QUALITY,
    USER_AGENT,
)
from diagnostics import DiagnosticLog
from models import PageMetadata, QualityLink, ScrapeResult

__all__ = [
    "FetchError",
    "build_session",
    "fetch_page",
    "classify_quality",
    "extract_metadata",
    "find_start_download",
    "resolve_redirect",
    "resolve_links",
    "scrape_movie",
]

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when a page cannot be downloaded."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url
        self.message = message


def build_session(pool_size: int = MAX_WORKERS) -> requests.Session:
    """Create a `requests.Session` with browser headers and no retries."""
    session = requests.Session()
    retry = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry, pool_maxsize=max(pool_size, 1))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept-Language": "en-US,en;q=0.9",
    })
    return session


def fetch_page(session: requests.Session, url: str, timeout: int = DEFAULT_TIMEOUT) -> str:
    """GET `url` and return its body, raising `FetchError` on any failure."""
    try:
        resp = session.get(url, timeout=timeout, allow_redirects=True)
        resp.raise_for_status()
    except requests.exceptions.RequestException as exc:
        raise FetchError(url, str(exc)) from exc
    return resp.text


def classify_quality(text: str, href: str) -> str:
    """Map anchor text/href to a quality label, first rule wins."""
    haystacks = (text.lower(), href)
    for needle, label in QUALITY_RULES:
        if any(needle in hay for hay in haystacks):
            return label
    return UNKNOWN_QUALITY


def _extract_name(soup: BeautifulSoup, log: DiagnosticLog) -> str:
    bold = soup.select_one(NAME_SELECTOR)
    name = bold.get_text().strip() if bold is not None else ""
    if name:
        log.ok(f"Movie name found: {name}")
        return name
    log.warn("Movie name not found in <b>, fallback to <p.info>")
    return "".join(block.get_text() for block in soup.select(INFO_SELECTOR)).strip()


def _extract_image(soup: BeautifulSoup, log: DiagnosticLog) -> Optional[str]:
    img = soup.select_one(f"img[src*='{BRAND_SUBSTRING}']")
    image = img.get("src") if img is not None else None
    if image:
        log.ok(f"Image found: {image}")
        return image
    log.warn("Image not found")
    return None


def extract_metadata(html: str, page_url: str, log: Optional[DiagnosticLog] = None) -> PageMetadata:
    """Read name, poster image and quality links from a movie page.

    Missing elements yield empty values; malformed markup never raises.
    """
    log = log if log is not None else DiagnosticLog(logger)
    soup = BeautifulSoup(html, "html.parser")
    name = _extract_name(soup, log)
    image = _extract_image(soup, log)

    links: Dict[str, QualityLink] = {}
    for anchor in soup.select(f"a[href*='{SERVER_PATH}']"):
        href = anchor.get("href", "")
        try:
            full_url = urljoin(page_url, href)
        except ValueError as exc:
            log.warn(f"Skipping malformed link {href!r}: {exc}")
            continue
        quality = classify_quality(anchor.get_text(), href)
        # later anchors with the same label replace earlier ones
        links[quality] = {"main_url": full_url}
        log.step(f"Found {quality} main_url: {full_url}")

    return {"name": name, "image": image, "links": links}


def find_start_download(html: str) -> Optional[str]:
    """Return the href of the first "Start Download Now" anchor, if any."""
    soup = BeautifulSoup(html, "html.parser")
    anchor = soup.select_one(f'a:-soup-contains("{START_DOWNLOAD_TEXT}")')
    if anchor is None:
        return None
    return anchor.get("href") or None


def resolve_redirect(
    session: requests.Session,
    main_url: str,
    timeout: int = DEFAULT_TIMEOUT,
    log: Optional[DiagnosticLog] = None,
    quality: str = "",
) -> Optional[str]:
    """Follow a server page to its download trigger and read `Location`.

    Returns the header value verbatim, or None when any step fails.
    """
    log = log if log is not None else DiagnosticLog(logger)
    label = quality or main_url
    try:
        log.step(f"Visiting server page for {label}: {main_url}")
        page = fetch_page(session, main_url, timeout=timeout)

        start_download = find_start_download(page)
        if not start_download:
            log.error(f"Start Download link not found for {label}")
            return None
        log.ok(f"Start Download link found for {label}: {start_download}")

        final_resp = session.head(
            urljoin(main_url, start_download),
            timeout=timeout,
            allow_redirects=False,
        )
    except FetchError as exc:
        log.error(f"Error resolving {label}: {exc.message}")
        return None
    except (requests.exceptions.RequestException, ValueError) as exc:
        # ValueError: urljoin rejects malformed hrefs such as "http://[bad/x"
        log.error(f"Error resolving {label}: {exc}")
        return None

    location = final_resp.headers.get("Location")
    if not location:
        log.warn(f"No redirect URL returned for {label}")
        return None
    log.ok(f"Redirect URL for {label}: {location}")
    return location


def resolve_links(
    session: requests.Session,
    links: Dict[str, QualityLink],
    timeout: int = DEFAULT_TIMEOUT,
    max_workers: int = MAX_WORKERS,
    log: Optional[DiagnosticLog] = None,
) -> Dict[str, QualityLink]:
    """Fill in `redirect_url` for every label that resolves.

    Labels run on a bounded thread pool, each with its own child log that is
    merged back in label order once all of them finish.
    """
    log = log if log is not None else DiagnosticLog(logger)
    if not links:
        return links

    child_logs = {quality: log.child() for quality in links}

    def _resolve(quality: str) -> Optional[str]:
        return resolve_redirect(
            session,
            links[quality]["main_url"],
            timeout=timeout,
            log=child_logs[quality],
            quality=quality,
        )

    workers = max(1, min(max_workers, len(links)))
    # Workers share `session`; only its connection pool (sized by build_session)
    # and cookie jar are touched concurrently, and no caller relies on cookies.
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resolver") as executor:
        futures = {quality: executor.submit(_resolve, quality) for quality in links}

    for quality, future in futures.items():
        redirect_url = future.result()
        if redirect_url:
            links[quality]["redirect_url"] = redirect_url
        log.extend(child_logs[quality].lines)
    return links


def scrape_movie(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT,
    max_workers: int = MAX_WORKERS,
    log: Optional[DiagnosticLog] = None,
) -> ScrapeResult:
    """Fetch, parse and resolve a movie page.

    Raises `FetchError` when the movie page itself cannot be fetched; link
    resolution failures only leave the affected label without `redirect_url`.
    """
    log = log if log is not None else DiagnosticLog(logger)
    owns_session = session is None
    active = session if session is not None else build_session(max_workers)
    try:
        log.step(f"Fetching main page: {url}")
        try:
            html = fetch_page(active, url, timeout=timeout)
        except FetchError as exc:
            log.error(f"Error fetching main page: {exc.message}")
            raise

        meta = extract_metadata(html, url, log)
        links = resolve_links(active, meta["links"], timeout=timeout, max_workers=max_workers, log=log)
        return {"name": meta["name"], "image": meta["image"], "links": links}
    finally:
        if owns_session:
            active.close()
