#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""HTTP front for the movie scraper: ``POST /api/scrape``."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import MethodNotAllowed

from constants import DEFAULT_TIMEOUT, ENABLE_DIAGNOSTICS, LOG_LEVEL, MAX_WORKERS, PORT
from diagnostics import DiagnosticLog
from models import ScrapeRequest
from scraper import FetchError, scrape_movie

logger = logging.getLogger(__name__)

SCRAPE_ENDPOINT = "/api/scrape"

app = Flask(__name__)
app.config.update(
    SCRAPE_DIAGNOSTICS=ENABLE_DIAGNOSTICS,
    SCRAPE_TIMEOUT=DEFAULT_TIMEOUT,
    SCRAPE_MAX_WORKERS=MAX_WORKERS,
)
CORS(
    app,
    resources={r"/api/*": {"origins": "*"}},
    methods=["POST", "OPTIONS"],
    allow_headers=["Content-Type"],
    send_wildcard=True,
)


def _is_absolute_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _error(message: str, status: int, log: Optional[DiagnosticLog] = None):
    body: Dict[str, Any] = {"error": message}
    if log is not None and app.config["SCRAPE_DIAGNOSTICS"]:
        body["logs"] = log.lines
    return jsonify(body), status


@app.route("/")
def index():
    return jsonify({
        "service": "movie-link-scraper",
        "endpoints": {"scrape": f"POST {SCRAPE_ENDPOINT}"},
    })


@app.route(SCRAPE_ENDPOINT, methods=["POST"])
def scrape():
    diagnostics = app.config["SCRAPE_DIAGNOSTICS"]
    log = DiagnosticLog(logger)

    payload: Optional[ScrapeRequest] = request.get_json(silent=True)
    url = payload.get("url") if isinstance(payload, dict) else None
    if isinstance(url, str):
        url = url.strip()
    if not url:
        log.error("URL missing in request body")
        return _error("URL required" if diagnostics else "URL is required", 400, log)
    if not isinstance(url, str) or not _is_absolute_url(url):
        log.error(f"Invalid URL in request body: {url!r}")
        return _error("Invalid URL", 400, log)

    try:
        result = scrape_movie(
            url,
            timeout=app.config["SCRAPE_TIMEOUT"],
            max_workers=app.config["SCRAPE_MAX_WORKERS"],
            log=log,
        )
    except FetchError:
        logger.exception("Failed to scrape %s", url)
        return _error("Failed to scrape" if diagnostics else "Failed to scrape page", 500, log)

    if diagnostics:
        result["logs"] = log.lines
    return jsonify(result)


@app.errorhandler(MethodNotAllowed)
def method_not_allowed(exc: MethodNotAllowed):
    if request.path == SCRAPE_ENDPOINT:
        return jsonify({"error": "POST only"}), 405
    return exc


# ---------- CLI entry ----------
if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")
    logger.info("Starting server on port %s", PORT)
    app.run(host="0.0.0.0", port=PORT)
