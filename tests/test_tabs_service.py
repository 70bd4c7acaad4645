from __future__ import annotations

import asyncio
import socket

import aiohttp
import pytest
from fastapi.testclient import TestClient

from pysoundcloud.auth.authenticator import AuthConfig, build_login_url
from pysoundcloud.auth.connection import AuthEvent, AuthTabServiceConnection
from pysoundcloud.auth.tabs import HostApp, TabsClient
from pysoundcloud.auth.tabs_service import TabsService, TabsSession, loopback_address


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("http://localhost:51121/callback", ("127.0.0.1", 51121, "/callback")),
        ("http://127.0.0.1/", ("127.0.0.1", 80, "/")),
        ("http://localhost:8080", ("127.0.0.1", 8080, "/")),
        ("https://localhost:8080/callback", None),
        ("http://example.com/callback", None),
        ("myapp://callback", None),
        (None, None),
    ],
)
def test_loopback_address(uri, expected) -> None:
    assert loopback_address(uri) == expected


def test_non_loopback_redirect_is_rejected() -> None:
    with pytest.raises(ValueError):
        TabsService("firefox", "myapp://callback", AuthTabServiceConnection())


def test_session_keeps_first_redirect_only() -> None:
    session = TabsSession("firefox", "http://localhost:1/cb")

    assert session.deliver_redirect({"code": "first"}) is True
    assert session.deliver_redirect({"code": "second"}) is False
    assert session.redirect_params == {"code": "first"}


def _connection() -> AuthTabServiceConnection:
    connection = AuthTabServiceConnection()
    connection.set_client_auth_url(
        build_login_url(AuthConfig("cid", "http://127.0.0.1:0/oauth/callback"))
    )
    return connection


def test_redirect_route_captures_code() -> None:
    connection = _connection()
    service = TabsService("firefox", connection.redirect_uri, connection)

    with TestClient(service.app) as client:
        resp = client.get("/oauth/callback", params={"code": "abc"})
        again = client.get("/oauth/callback", params={"code": "def"})

    assert resp.status_code == 200
    assert "Connected to SoundCloud" in resp.text
    assert again.status_code == 409
    assert service.session.redirect_params == {"code": "abc"}
    assert connection.state is AuthEvent.AUTHENTICATION_ENDED


def test_redirect_route_reports_error() -> None:
    connection = _connection()
    service = TabsService("firefox", connection.redirect_uri, connection)

    with TestClient(service.app) as client:
        resp = client.get("/oauth/callback", params={"error": "access_denied"})

    assert resp.status_code == 400
    assert service.session.redirect_params == {"error": "access_denied"}


def test_redirect_route_without_code() -> None:
    connection = _connection()
    service = TabsService("firefox", connection.redirect_uri, connection)

    with TestClient(service.app) as client:
        resp = client.get("/oauth/callback")

    assert resp.status_code == 400
    assert connection.state is AuthEvent.AUTHENTICATION_ENDED


def test_bind_fails_when_port_is_taken() -> None:
    blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    blocker.bind(("127.0.0.1", 0))
    blocker.listen()
    try:
        port = blocker.getsockname()[1]
        connection = AuthTabServiceConnection()
        connection.set_client_auth_url(
            build_login_url(AuthConfig("cid", f"http://127.0.0.1:{port}/oauth/callback"))
        )
        host = HostApp("my.app")

        assert TabsClient.bind_tabs_service(host, "firefox", connection) is False
        assert not host.is_bound(connection)
    finally:
        blocker.close()


def test_bind_requires_a_browser_package() -> None:
    host = HostApp("my.app")
    assert TabsClient.bind_tabs_service(host, None, _connection()) is False


@pytest.mark.asyncio
async def test_service_serves_redirect_end_to_end() -> None:
    connection = _connection()
    host = HostApp("my.app")

    assert TabsClient.bind_tabs_service(host, "firefox", connection) is True
    service = host._services[connection]
    try:
        await asyncio.wait_for(connection.wait_for(AuthEvent.READY_TO_AUTHENTICATE), timeout=5)
        assert connection.session is service.session
        assert service.session.prefetch_urls == [connection.client_auth_url]

        url = f"http://127.0.0.1:{service.port}/oauth/callback?code=xyz"
        async with aiohttp.ClientSession() as http:
            async with http.get(url) as resp:
                assert resp.status == 200

        await asyncio.wait_for(connection.wait_for(AuthEvent.AUTHENTICATION_ENDED), timeout=5)
        assert service.session.redirect_params == {"code": "xyz"}
    finally:
        host.unbind_service(connection)
        await asyncio.wait_for(service._task, timeout=10)

    assert not service.running


def test_bind_outside_event_loop_releases_socket(monkeypatch) -> None:
    opened: list[TabsService] = []
    original = TabsService.open

    def _open(self: TabsService) -> None:
        original(self)
        opened.append(self)

    monkeypatch.setattr(TabsService, "open", _open)
    connection = _connection()
    host = HostApp("my.app")

    assert TabsClient.bind_tabs_service(host, "firefox", connection) is False
    assert not host.is_bound(connection)
    assert opened[0]._socket.fileno() == -1
    assert not opened[0].running


def test_disconnect_records_the_error() -> None:
    connection = _connection()
    error = RuntimeError("boom")

    connection.on_service_disconnected(error)

    assert connection.error is error
    assert connection.state is AuthEvent.AUTHENTICATION_ENDED

    connection.reset()
    assert connection.error is None
    assert connection.state is None
