"""Loopback tab service hosting the OAuth redirect URI.

The service is a tiny FastAPI app served by uvicorn on a socket bound
before the server starts, so a busy port is reported synchronously as a
failed bind instead of surfacing later from inside uvicorn.

Lifecycle:
1. ``open()`` binds the loopback socket named by the redirect URI.
2. ``start()`` schedules uvicorn on the running loop.
3. Once uvicorn reports it has started, the connection receives
   ``on_tabs_service_connected(session)``.
4. A request on the redirect path stores its query parameters on the
   session and notifies ``on_redirect(params)``.
5. ``stop()`` asks uvicorn to exit.  If the server stops on its own, or a
   connection callback raises, the connection receives
   ``on_service_disconnected(error)``.
"""

from __future__ import annotations

import asyncio
import logging
import socket
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlsplit

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

if TYPE_CHECKING:
    from pysoundcloud.auth.tabs import TabsServiceConnection

logger = logging.getLogger("pysoundcloud.tabs")

_LOOPBACK_HOSTS = {"localhost": "127.0.0.1", "127.0.0.1": "127.0.0.1"}

_RESPONSE_PAGE = """<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>pysoundcloud</title>
    <style>
      body {
        font-family: system-ui, -apple-system, sans-serif;
        display: flex; justify-content: center; align-items: center;
        height: 100vh; margin: 0;
        background: #f2f2f2; color: #333;
      }
      .wrap { text-align: center; }
      h2 { color: #ff5500; }
      p { color: #999; }
    </style>
  </head>
  <body>
    <div class="wrap">
      <h2>Connected to SoundCloud</h2>
      <p>You can close this tab and return to the application.</p>
    </div>
  </body>
</html>"""


def loopback_address(redirect_uri: Optional[str]) -> Optional[tuple[str, int, str]]:
    """Return ``(host, port, path)`` if *redirect_uri* is loopback http."""
    if not redirect_uri:
        return None
    parts = urlsplit(redirect_uri)
    host = _LOOPBACK_HOSTS.get(parts.hostname or "")
    if parts.scheme != "http" or host is None:
        return None
    try:
        port = parts.port if parts.port is not None else 80
    except ValueError:
        return None
    return host, port, parts.path or "/"


class TabsSession:
    """State of one browser-tab session, owned by the tab service."""

    def __init__(self, package: Optional[str], redirect_uri: str) -> None:
        self.package = package
        self.redirect_uri = redirect_uri
        self.prefetch_urls: list[str] = []
        self._redirect_params: Optional[dict[str, str]] = None
        self._received = asyncio.Event()

    def may_launch_url(self, url: str) -> bool:
        """Hint that *url* is about to be opened in this session."""
        self.prefetch_urls.append(url)
        return True

    @property
    def redirect_params(self) -> Optional[dict[str, str]]:
        """Query parameters of the first redirect, if one has arrived."""
        return self._redirect_params

    def deliver_redirect(self, params: dict[str, str]) -> bool:
        """Record a redirect.  Only the first one counts."""
        if self._redirect_params is not None:
            return False
        self._redirect_params = dict(params)
        self._received.set()
        return True

    async def wait_for_redirect(self, timeout: Optional[float] = None) -> dict[str, str]:
        await asyncio.wait_for(self._received.wait(), timeout=timeout)
        return dict(self._redirect_params or {})


class TabsService:
    """uvicorn-served FastAPI app listening on the redirect URI."""

    def __init__(
        self,
        package: Optional[str],
        redirect_uri: str,
        connection: "TabsServiceConnection",
    ) -> None:
        address = loopback_address(redirect_uri)
        if address is None:
            raise ValueError(f"not a loopback http redirect URI: {redirect_uri!r}")
        self.host, self.port, self.path = address
        self.package = package
        self.session = TabsSession(package, redirect_uri)
        self.app = self._build_app()
        self._connection = connection
        self._socket: Optional[socket.socket] = None
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self._stopping = False
        self._error: Optional[BaseException] = None

    def _build_app(self) -> FastAPI:
        """Build the FastAPI app that receives the OAuth redirect."""
        app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)

        @app.get(self.path, response_class=HTMLResponse)
        async def redirect(request: Request) -> HTMLResponse:
            params = dict(request.query_params)
            if not self.session.deliver_redirect(params):
                return HTMLResponse("<h1>Already handled.</h1>", status_code=409)
            logger.info("redirect received on %s", self.path)
            self._connection.on_redirect(params)

            error = params.get("error")
            if error:
                return HTMLResponse(f"<h1>Authentication failed: {error}</h1>", status_code=400)
            if not params.get("code"):
                return HTMLResponse("<h1>No authorization code received.</h1>", status_code=400)
            return HTMLResponse(_RESPONSE_PAGE, status_code=200)

        return app

    # ── Lifecycle ───────────────────────────────────────────────────

    def open(self) -> None:
        """Bind the listening socket.  Raises ``OSError`` if unavailable."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        self._socket = sock
        # Port 0 picks a free port.
        self.port = sock.getsockname()[1]

    def start(self) -> None:
        """Schedule the server on the running event loop.

        Raises ``RuntimeError`` when no loop is running; nothing is
        scheduled in that case.
        """
        loop = asyncio.get_running_loop()
        if self._socket is None:
            self.open()
        config = uvicorn.Config(self.app, log_level="error")
        self._server = uvicorn.Server(config)
        self._task = loop.create_task(self._serve())

    def stop(self) -> None:
        self._stopping = True
        if self._server is not None:
            self._server.should_exit = True
        elif self._socket is not None:
            self._socket.close()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def error(self) -> Optional[BaseException]:
        """What stopped the service unexpectedly, if anything did."""
        return self._error

    async def _serve(self) -> None:
        assert self._server is not None and self._socket is not None
        server_task = asyncio.create_task(self._server.serve(sockets=[self._socket]))
        try:
            while not self._server.started and not server_task.done():
                await asyncio.sleep(0.05)
            if self._server.started and not self._stopping:
                logger.info("tab service listening on %s:%d%s", self.host, self.port, self.path)
                self._connection.on_tabs_service_connected(self.session)
            await server_task
        except Exception as exc:
            logger.exception("tab service for %s failed", self.package)
            self._error = exc
            self._server.should_exit = True
            await asyncio.gather(server_task, return_exceptions=True)
        finally:
            self._socket.close()

        if not self._stopping:
            logger.warning("tab service stopped without being unbound")
            self._connection.on_service_disconnected(self._error)
