"""Browser tabs: browser resolution, tab-service binding and intents.

A browser tab is opened through the :mod:`webbrowser` registry.  The tab
service that pairs with it is a loopback HTTP service (see
:mod:`pysoundcloud.auth.tabs_service`) hosting the redirect URI, so the
application learns when the browser comes back.

Typical use::

    host = HostApp("my-app")
    package = TabsClient.get_package_name(host)
    TabsClient.bind_tabs_service(host, package, connection)
    # ... connection.on_tabs_service_connected(session) fires later
    TabsIntentBuilder(session).build().launch_url(host, url)
"""

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass, field
from typing import Iterable, Optional

from pysoundcloud.auth.tabs_service import TabsService, TabsSession, loopback_address
from pysoundcloud.errors import ServiceNotBoundError

logger = logging.getLogger("pysoundcloud.tabs")

# Controllers resolved by get_package_name, keyed by the name handed out.
_resolved: dict[str, webbrowser.BaseBrowser] = {}

# webbrowser.open() "new" values
OPEN_SAME_WINDOW = 0
OPEN_NEW_WINDOW = 1
OPEN_NEW_TAB = 2


def _controller(package: Optional[str]) -> webbrowser.BaseBrowser:
    if package is None:
        return webbrowser.get()
    controller = _resolved.get(package)
    return controller if controller is not None else webbrowser.get(package)


class TabsServiceConnection:
    """Receives notifications from a bound tab service."""

    @property
    def redirect_uri(self) -> Optional[str]:
        """Redirect URI the tab service should listen on."""
        return None

    def on_tabs_service_connected(self, session: TabsSession) -> None:
        raise NotImplementedError

    def on_redirect(self, params: dict[str, str]) -> None:
        pass

    def on_service_disconnected(self, error: Optional[BaseException] = None) -> None:
        raise NotImplementedError


class HostApp:
    """The application opening browser tabs, identified by *package_name*."""

    def __init__(self, package_name: str) -> None:
        self.package_name = package_name
        self._services: dict[TabsServiceConnection, TabsService] = {}

    def bind_service(self, connection: TabsServiceConnection, service: TabsService) -> None:
        service.start()
        self._services[connection] = service

    def unbind_service(self, connection: TabsServiceConnection) -> None:
        service = self._services.pop(connection, None)
        if service is None:
            raise ServiceNotBoundError(f"service not registered: {connection!r}")
        logger.info("unbinding tab service for %s", service.package)
        service.stop()

    def is_bound(self, connection: TabsServiceConnection) -> bool:
        return connection in self._services


class TabsClient:
    """Entry points for resolving a browser and binding its tab service."""

    @staticmethod
    def get_package_name(
        host: HostApp, packages: Optional[Iterable[str]] = None
    ) -> Optional[str]:
        """Name of the first usable browser among *packages*.

        With no *packages* the system default browser is used.  Returns
        ``None`` when no runnable browser is found.
        """
        candidates: list[Optional[str]] = list(packages) if packages else [None]
        for name in candidates:
            try:
                controller = webbrowser.get(name)
            except webbrowser.Error:
                logger.debug("browser %r not available", name)
                continue
            resolved = name or getattr(controller, "name", None) or "default"
            _resolved[resolved] = controller
            logger.debug("resolved browser %r for %s", resolved, host.package_name)
            return resolved
        return None

    @staticmethod
    def bind_tabs_service(
        host: HostApp, package: Optional[str], connection: TabsServiceConnection
    ) -> bool:
        """Bind the tab service for *package*.

        Must be called from a running event loop.  Returns ``False`` when
        *package* is ``None``, the connection has no loopback redirect URI,
        the redirect address cannot be bound, or no loop is running.
        """
        if package is None:
            return False
        redirect_uri = connection.redirect_uri
        if loopback_address(redirect_uri) is None:
            logger.error("cannot host redirect URI %r", redirect_uri)
            return False

        service = TabsService(package, redirect_uri, connection)
        try:
            service.open()
        except OSError as exc:
            logger.error("cannot listen on %s: %s", redirect_uri, exc)
            return False

        try:
            host.bind_service(connection, service)
        except RuntimeError as exc:
            logger.error("cannot start tab service: %s", exc)
            service.stop()
            return False
        return True


@dataclass
class TabsIntent:
    """A request to open a URL in a browser tab."""

    session: Optional[TabsSession] = None
    package: Optional[str] = None
    headers: dict[str, str] = field(default_factory=dict)
    new: int = OPEN_NEW_TAB
    autoraise: bool = True
    url: Optional[str] = None

    def launch_url(self, host: HostApp, url: str) -> bool:
        """Open *url* in the intent's browser (the default one if unset)."""
        self.url = url
        controller = _controller(self.package)
        logger.info("opening %s in %s for %s", url, self.package or "default browser", host.package_name)
        return controller.open(url, new=self.new, autoraise=self.autoraise)


class TabsIntentBuilder:
    """Customizes how the browser tab is shown before it is launched."""

    def __init__(self, session: Optional[TabsSession] = None) -> None:
        self._session = session
        self._new = OPEN_NEW_TAB
        self._autoraise = True

    def set_new_window(self) -> "TabsIntentBuilder":
        self._new = OPEN_NEW_WINDOW
        return self

    def set_new_tab(self) -> "TabsIntentBuilder":
        self._new = OPEN_NEW_TAB
        return self

    def set_same_window(self) -> "TabsIntentBuilder":
        self._new = OPEN_SAME_WINDOW
        return self

    def set_autoraise(self, autoraise: bool) -> "TabsIntentBuilder":
        self._autoraise = autoraise
        return self

    def build(self) -> TabsIntent:
        return TabsIntent(
            session=self._session,
            package=self._session.package if self._session else None,
            new=self._new,
            autoraise=self._autoraise,
        )
