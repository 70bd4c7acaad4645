"""Service connection that reports the two steps of an authentication flow."""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from pysoundcloud.auth.tabs import TabsServiceConnection
from pysoundcloud.auth.tabs_service import TabsSession

logger = logging.getLogger("pysoundcloud.auth")


class AuthEvent(enum.Enum):
    READY_TO_AUTHENTICATE = "ready-to-authenticate"
    AUTHENTICATION_ENDED = "authentication-ended"


class AuthenticationCallback:
    """Notified when authentication can begin and when it has ended."""

    def on_ready_to_authenticate(self) -> None:
        raise NotImplementedError

    def on_authentication_ended(self) -> None:
        pass


class AuthTabServiceConnection(TabsServiceConnection):
    """Connects a tab service to an :class:`AuthenticationCallback`.

    Besides the callback, both notifications can be awaited::

        await connection.wait_for(AuthEvent.READY_TO_AUTHENTICATE)
    """

    def __init__(self, callback: Optional[AuthenticationCallback] = None) -> None:
        self._callback = callback
        self._client_auth_url: Optional[str] = None
        self._session: Optional[TabsSession] = None
        self._state: Optional[AuthEvent] = None
        self._error: Optional[BaseException] = None
        self._events = {event: asyncio.Event() for event in AuthEvent}

    def set_client_auth_url(self, url: str) -> None:
        self._client_auth_url = url

    def reset(self) -> None:
        """Forget the previous flow so both notifications can fire again."""
        self._session = None
        self._state = None
        self._error = None
        for event in self._events.values():
            event.clear()

    @property
    def client_auth_url(self) -> Optional[str]:
        return self._client_auth_url

    @property
    def redirect_uri(self) -> Optional[str]:
        if not self._client_auth_url:
            return None
        query = parse_qs(urlsplit(self._client_auth_url).query)
        values = query.get("redirect_uri")
        return values[0] if values else None

    @property
    def session(self) -> Optional[TabsSession]:
        """The tab session, available once the service is connected."""
        return self._session

    @property
    def state(self) -> Optional[AuthEvent]:
        """The most recent notification, ``None`` before the first."""
        return self._state

    @property
    def error(self) -> Optional[BaseException]:
        """Why the tab service stopped, if it failed."""
        return self._error

    async def wait_for(self, event: AuthEvent) -> None:
        await self._events[event].wait()

    # ── TabsServiceConnection ───────────────────────────────────────

    def on_tabs_service_connected(self, session: TabsSession) -> None:
        self._session = session
        if self._client_auth_url:
            session.may_launch_url(self._client_auth_url)
        self._notify(AuthEvent.READY_TO_AUTHENTICATE)

    def on_redirect(self, params: dict[str, str]) -> None:
        self._notify(AuthEvent.AUTHENTICATION_ENDED)

    def on_service_disconnected(self, error: Optional[BaseException] = None) -> None:
        self._error = error
        self._notify(AuthEvent.AUTHENTICATION_ENDED)

    def _notify(self, event: AuthEvent) -> None:
        if self._events[event].is_set():
            return
        logger.debug("authentication event: %s", event.value)
        self._state = event
        self._events[event].set()
        if self._callback is None:
            return
        if event is AuthEvent.READY_TO_AUTHENTICATE:
            self._callback.on_ready_to_authenticate()
        else:
            self._callback.on_authentication_ended()
