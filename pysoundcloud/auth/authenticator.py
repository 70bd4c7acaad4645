"""Login URL construction shared by every authenticator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from pysoundcloud.auth.tabs import TabsIntent

CONNECT_URL = "https://soundcloud.com/connect"

# Tokens are requested without expiry; SoundCloud may still revoke them.
DEFAULT_SCOPE = "non-expiring"

REFERRER_SCHEME = "app://"


@dataclass(frozen=True)
class AuthConfig:
    """Credentials identifying the application requesting authorization."""

    client_id: str
    redirect_uri: str


def build_login_url(config: AuthConfig, scope: str = DEFAULT_SCOPE) -> str:
    """Build the SoundCloud connect URL for *config*."""
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": "code",
        "scope": scope,
    }
    return f"{CONNECT_URL}?{urlencode(params)}"


def add_referrer_to_intent(intent: TabsIntent, package_name: str) -> None:
    """Tag *intent* with a referrer identifying the calling application.

    The value is ``app://<package_name>``, the desktop counterpart of the
    ``android-app://<package>`` referrer scheme used for browser tabs on
    Android.  :func:`referrer_package` recovers the package name.
    """
    intent.headers["Referer"] = f"{REFERRER_SCHEME}{package_name}"


def referrer_package(intent: TabsIntent) -> Optional[str]:
    """Package name carried by the referrer of *intent*, if any."""
    referrer = intent.headers.get("Referer", "")
    if not referrer.startswith(REFERRER_SCHEME):
        return None
    return referrer[len(REFERRER_SCHEME):]


class SoundCloudAuthenticator:
    """Base class for the ways of sending a user to the login page."""

    def __init__(self, client_id: str, redirect_uri: str) -> None:
        self.config = AuthConfig(client_id, redirect_uri)

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri

    def login_url(self) -> str:
        return build_login_url(self.config)

    def prepare_authentication_flow(self) -> bool:
        raise NotImplementedError

    def launch_authentication_flow(self) -> None:
        raise NotImplementedError
