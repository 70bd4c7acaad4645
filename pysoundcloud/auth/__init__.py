"""Auth system — SoundCloud OAuth in a browser tab."""

from pysoundcloud.auth.authenticator import (
    AuthConfig,
    SoundCloudAuthenticator,
    add_referrer_to_intent,
    build_login_url,
    referrer_package,
)
from pysoundcloud.auth.connection import (
    AuthenticationCallback,
    AuthEvent,
    AuthTabServiceConnection,
)
from pysoundcloud.auth.tabs import HostApp, TabsClient, TabsIntent, TabsIntentBuilder
from pysoundcloud.auth.tabs_authenticator import TabsSoundCloudAuthenticator
from pysoundcloud.auth.tokens import AuthToken, exchange_code, refresh_token_if_needed

__all__ = [
    "AuthConfig",
    "AuthEvent",
    "AuthToken",
    "AuthTabServiceConnection",
    "AuthenticationCallback",
    "HostApp",
    "SoundCloudAuthenticator",
    "TabsClient",
    "TabsIntent",
    "TabsIntentBuilder",
    "TabsSoundCloudAuthenticator",
    "add_referrer_to_intent",
    "build_login_url",
    "referrer_package",
    "exchange_code",
    "refresh_token_if_needed",
]
