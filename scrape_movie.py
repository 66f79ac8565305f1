"""Command line entry point: scrape one movie page and print its links."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from constants import DEFAULT_TIMEOUT, LOG_LEVEL, MAX_WORKERS
from diagnostics import DiagnosticLog
from models import ScrapeResult
from scraper import FetchError, scrape_movie

logger = logging.getLogger("scrape_movie")


def write_json(output_path: Path, result: ScrapeResult) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")


def format_summary(result: ScrapeResult) -> List[str]:
    """One line per quality, flagged by whether the redirect resolved."""
    lines = [f"Name:  {result['name'] or '—'}", f"Image: {result['image'] or '—'}"]
    if not result["links"]:
        lines.append("No download links found.")
    for quality, link in result["links"].items():
        badge = "OK" if link.get("redirect_url") else "--"
        target = link.get("redirect_url", "unresolved")
        lines.append(f"[{badge}] {quality:<7} {link['main_url']}  ->  {target}")
    return lines


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Extract a movie's name, poster and per-quality download links, then resolve each redirect."
    )
    p.add_argument("url", help="Absolute URL of the movie page.")
    p.add_argument("--output", "-o", help="Write the full JSON result (with logs) to this file.")
    p.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT,
                   help=f"HTTP timeout in seconds per request (default: {DEFAULT_TIMEOUT}).")
    p.add_argument("--workers", type=int, default=MAX_WORKERS,
                   help=f"Qualities resolved in parallel (default: {MAX_WORKERS}).")
    p.add_argument("--quiet", "-q", action="store_true", help="Only log warnings and errors.")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else LOG_LEVEL,
        format="%(levelname)s %(message)s",
    )

    url = args.url.strip()
    if not url.startswith(("http://", "https://")):
        raise SystemExit(f"Invalid URL: {url}")

    log = DiagnosticLog(logger)
    try:
        result = scrape_movie(url, timeout=args.timeout, max_workers=max(args.workers, 1), log=log)
    except FetchError as exc:
        raise SystemExit(f"Failed to scrape {url}: {exc.message}")

    for line in format_summary(result):
        print(line)

    if args.output:
        result["logs"] = log.lines
        write_json(Path(args.output), result)
        print(f"\nJSON written -> {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
