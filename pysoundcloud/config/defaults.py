"""Default configuration values for pysoundcloud."""

from __future__ import annotations

DEFAULT_CONFIG: dict = {
    "auth": {
        "client_id": None,
        "client_secret": None,
        "redirect_uri": "http://localhost:51121/callback",
        "access_token": None,
        "refresh_token": None,
        "token_expiry": None,  # None = non-expiring
        "scope": None,
    },
    "app": {
        # Sent as the referrer of the login page.
        "package_name": "pysoundcloud",
    },
    "browser": {
        "packages": [],  # preferred webbrowser names, empty = system default
    },
    "api": {
        "base_url": "https://api.soundcloud.com",
    },
}
