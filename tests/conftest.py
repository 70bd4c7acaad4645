"""
Pytest config.

Pins the repo root on sys.path so `import pysoundcloud` works without an
install, and provides fakes for the browser registry and aiohttp.
"""

from __future__ import annotations

import json
import sys
import webbrowser
from pathlib import Path
from typing import Any

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()


class FakeBrowser:
    def __init__(self, name: str) -> None:
        self.name = name
        self.opened: list[tuple[str, int, bool]] = []

    def open(self, url: str, new: int = 0, autoraise: bool = True) -> bool:
        self.opened.append((url, new, autoraise))
        return True


class FakeBrowsers:
    """Stands in for the webbrowser registry."""

    def __init__(self) -> None:
        self.available: dict[str, FakeBrowser] = {}
        self.default: str | None = None

    def add(self, name: str, default: bool = False) -> FakeBrowser:
        browser = FakeBrowser(name)
        self.available[name] = browser
        if default or self.default is None:
            self.default = name
        return browser

    def get(self, using: str | None = None) -> FakeBrowser:
        name = using or self.default
        if name is None or name not in self.available:
            raise webbrowser.Error("could not locate runnable browser")
        return self.available[name]


@pytest.fixture
def browsers(monkeypatch: pytest.MonkeyPatch) -> FakeBrowsers:
    from pysoundcloud.auth import tabs

    fake = FakeBrowsers()
    monkeypatch.setattr(webbrowser, "get", fake.get)
    monkeypatch.setattr(tabs, "_resolved", {})
    return fake


@pytest.fixture
def started_services(monkeypatch: pytest.MonkeyPatch) -> list[Any]:
    """Keep bound tab services from launching uvicorn; record them instead."""
    from pysoundcloud.auth.tabs_service import TabsService

    started: list[Any] = []
    monkeypatch.setattr(TabsService, "start", lambda self: started.append(self))
    return started


class FakeResponse:
    def __init__(self, status: int, payload: Any) -> None:
        self.status = status
        self.ok = status < 400
        self.reason = "OK" if self.ok else "Error"
        self._payload = payload

    async def json(self, content_type: str | None = None) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def text(self) -> str:
        return json.dumps(self._payload)

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class FakeSession:
    """Minimal aiohttp.ClientSession double returning canned responses."""

    def __init__(self, responses: list[Any]) -> None:
        self._responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)

    async def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch):
    """Install a FakeSession as aiohttp.ClientSession.

    Call the fixture with (status, payload) pairs, or with an exception to
    raise from the request itself; returns the session.  A payload that is
    an exception is raised from ``json()``.
    """
    import aiohttp

    def _install(*responses: Any) -> FakeSession:
        session = FakeSession(
            [r if isinstance(r, Exception) else FakeResponse(*r) for r in responses]
        )
        monkeypatch.setattr(aiohttp, "ClientSession", lambda *a, **kw: session)
        return session

    return _install


@pytest.fixture
def config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config.json"
    monkeypatch.setattr("pysoundcloud.config.config._CONFIG_PATH", path)
    return path
