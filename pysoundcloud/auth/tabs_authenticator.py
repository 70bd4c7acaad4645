"""Authenticate a SoundCloud user in a browser tab.

The redirect URI must be a loopback http URI (``http://localhost:<port>/...``)
registered for the application on SoundCloud; the tab service listens there
and captures the authorization code.  Tokens are requested non-expiring by
default, which does not guarantee their longevity.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from pysoundcloud.auth.authenticator import SoundCloudAuthenticator, add_referrer_to_intent
from pysoundcloud.auth.connection import (
    AuthenticationCallback,
    AuthEvent,
    AuthTabServiceConnection,
)
from pysoundcloud.auth.tabs import HostApp, TabsClient, TabsIntentBuilder
from pysoundcloud.errors import AuthenticationError, AuthenticationNotReadyError

logger = logging.getLogger("pysoundcloud.auth")


class _LaunchWhenReady(AuthenticationCallback):
    def __init__(self, authenticator: "TabsSoundCloudAuthenticator") -> None:
        self._authenticator = authenticator

    def on_ready_to_authenticate(self) -> None:
        self._authenticator.launch_authentication_flow()


class TabsSoundCloudAuthenticator(SoundCloudAuthenticator):
    """Sends the user to the SoundCloud login page in a browser tab.

    Without *service_connection* the tab is launched as soon as the tab
    service is ready.  With one, the caller decides when to call
    :meth:`launch_authentication_flow`, typically from its own
    :class:`AuthenticationCallback`.

    All methods must be called from the thread running the event loop.
    """

    def __init__(
        self,
        client_id: str,
        redirect_uri: str,
        host: HostApp,
        service_connection: Optional[AuthTabServiceConnection] = None,
        browser_packages: Optional[Iterable[str]] = None,
    ) -> None:
        super().__init__(client_id, redirect_uri)
        self.host = host
        self.service_connection = service_connection or AuthTabServiceConnection(
            _LaunchWhenReady(self)
        )
        self.browser_package_name = TabsClient.get_package_name(host, browser_packages)
        self._tabs_intent_builder: Optional[TabsIntentBuilder] = None

    def prepare_authentication_flow(self) -> bool:
        """Bind the tab service that reports when authentication can start.

        Returns whether a browser was found and the service could be bound.
        """
        self.service_connection.reset()
        self.service_connection.set_client_auth_url(self.login_url())

        if self.browser_package_name is None:
            logger.warning("no browser available for authentication")
            return False
        return TabsClient.bind_tabs_service(
            self.host, self.browser_package_name, self.service_connection
        )

    def launch_authentication_flow(self) -> None:
        """Open the login page using the custom builder, or a default one."""
        if self._tabs_intent_builder is None:
            self._tabs_intent_builder = self.new_tabs_intent_builder()

        intent = self._tabs_intent_builder.build()
        add_referrer_to_intent(intent, self.host.package_name)
        intent.package = self.browser_package_name
        intent.launch_url(self.host, self.login_url())

    def set_tabs_intent_builder(self, builder: TabsIntentBuilder) -> None:
        self._tabs_intent_builder = builder

    def new_tabs_intent_builder(self) -> TabsIntentBuilder:
        """A builder for customizing the tab, bound to the current session.

        Only valid once the connection has reported
        ``on_ready_to_authenticate``; raises
        :class:`AuthenticationNotReadyError` before that.
        """
        session = self.service_connection.session
        if session is None:
            raise AuthenticationNotReadyError(
                "tab service is not connected yet; wait for on_ready_to_authenticate"
            )
        return TabsIntentBuilder(session)

    def unbind_service(self) -> None:
        """Release the tab service once authentication is over or abandoned."""
        self.host.unbind_service(self.service_connection)

    async def wait_for_authorization_code(self, timeout: Optional[float] = None) -> str:
        """Wait for the flow to end and return the authorization code.

        Raises ``asyncio.TimeoutError`` if *timeout* elapses first and
        :class:`AuthenticationError` if the redirect carried no code or the
        tab service failed before one arrived.
        """
        await asyncio.wait_for(
            self.service_connection.wait_for(AuthEvent.AUTHENTICATION_ENDED), timeout=timeout
        )
        session = self.service_connection.session
        params = session.redirect_params if session is not None else None
        if not params:
            error = self.service_connection.error
            if error is not None:
                raise AuthenticationError(f"tab service failed: {error}") from error
            raise AuthenticationError("authentication ended without a redirect")
        if params.get("error"):
            raise AuthenticationError(params.get("error_description") or params["error"])
        code = params.get("code")
        if not code:
            raise AuthenticationError("redirect carried no authorization code")
        return code
