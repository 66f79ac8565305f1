"""Shared fixtures: an offline stand-in for `requests.Session`."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import pytest
import requests
from requests.structures import CaseInsensitiveDict

MOVIE_URL = "https://www.filmyzilla.example/movie/sample-movie.html"
SERVER_720_URL = "https://www.filmyzilla.example/server/720p-abc"
FINAL_720_URL = "https://www.filmyzilla.example/final/xyz"
CDN_URL = "https://cdn.example/file.mp4"

MOVIE_HTML = """
<html>
  <body>
    <img src="https://www.filmyzilla.example/images/filmyzilla_logo.png">
    <p class="info"><b>Sample Movie</b></p>
    <a href="/server/720p-abc">720p Server</a>
  </body>
</html>
"""

SERVER_HTML = """
<html><body>
  <a href="/ads">Ads</a>
  <a href="/final/xyz">Start Download Now</a>
</body></html>
"""


class DummyResponse:  # pylint: disable=too-few-public-methods
    """Minimal stub mimicking requests.Response for tests."""

    def __init__(
        self,
        *,
        status_code: int = 200,
        url: str = "",
        text: str = "",
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.url = url
        self.text = text
        self.headers = CaseInsensitiveDict(headers or {})

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error for url: {self.url}")


Route = Union[DummyResponse, Exception]


class DummySession(requests.Session):
    """Serves canned responses keyed by (method, url); anything else is unreachable."""

    def __init__(self, routes: Dict[Tuple[str, str], Route]) -> None:
        super().__init__()
        self._routes = routes
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.closed = False

    def _dispatch(self, method: str, url: str, kwargs: Dict[str, Any]) -> DummyResponse:
        self.calls.append((method, url, kwargs))
        route = self._routes.get((method, url))
        if route is None:
            raise requests.exceptions.ConnectionError(f"unreachable: {url}")
        if isinstance(route, Exception):
            raise route
        if not route.url:
            route.url = url
        return route

    def get(self, url: str, **kwargs: Any) -> DummyResponse:  # type: ignore[override]
        return self._dispatch("GET", url, kwargs)

    def head(self, url: str, **kwargs: Any) -> DummyResponse:  # type: ignore[override]
        return self._dispatch("HEAD", url, kwargs)

    def close(self) -> None:  # pragma: no cover - mirror close contract
        self.closed = True


def sample_routes() -> Dict[Tuple[str, str], Route]:
    """Routes for the movie page, its 720p server page and the final redirect."""
    return {
        ("GET", MOVIE_URL): DummyResponse(text=MOVIE_HTML),
        ("GET", SERVER_720_URL): DummyResponse(text=SERVER_HTML),
        ("HEAD", FINAL_720_URL): DummyResponse(status_code=302, headers={"Location": CDN_URL}),
    }


@pytest.fixture
def make_session() -> Callable[..., DummySession]:
    def _factory(routes: Optional[Dict[Tuple[str, str], Route]] = None) -> DummySession:
        return DummySession(sample_routes() if routes is None else routes)

    return _factory


@pytest.fixture
def patch_session(monkeypatch: pytest.MonkeyPatch, make_session: Callable[..., DummySession]):
    """Make `scraper.build_session` hand out one dummy session; returns a holder."""

    holder: Dict[str, Any] = {"session": None, "built": 0}

    def _install(routes: Optional[Dict[Tuple[str, str], Route]] = None) -> DummySession:
        session = make_session(routes)
        holder["session"] = session

        def _fake_build_session(pool_size: int = 1) -> DummySession:
            del pool_size
            holder["built"] += 1
            return session

        monkeypatch.setattr("scraper.build_session", _fake_build_session)
        return session

    holder["install"] = _install
    return holder
