"""pysoundcloud login — authenticate with SoundCloud in a browser tab."""

from __future__ import annotations

import asyncio
from typing import Optional

import click
from rich.console import Console

from pysoundcloud.api.client import SoundCloudClient
from pysoundcloud.auth.tabs import HostApp
from pysoundcloud.auth.tabs_authenticator import TabsSoundCloudAuthenticator
from pysoundcloud.auth.tokens import exchange_code
from pysoundcloud.config.config import Config
from pysoundcloud.errors import ApiError, AuthenticationError, TokenExchangeError


console = Console()


async def _ask_credentials(cfg: Config) -> bool:
    """Prompt for the app credentials that are not configured yet."""
    console.print("[dim]register an app at https://soundcloud.com/you/apps[/dim]")
    for key, label in (("auth.client_id", "client id"), ("auth.client_secret", "client secret")):
        if cfg.get(key):
            continue
        try:
            value = console.input(f"[bold bright_cyan]{label}: [/]").strip()
        except (KeyboardInterrupt, EOFError):
            return False
        if not value:
            return False
        cfg.set(key, value)
    await cfg.save()
    return True


async def _login(timeout: Optional[float]) -> bool:
    cfg = await Config.load()
    if not cfg.has_credentials():
        if not await _ask_credentials(cfg):
            console.print("[red]client id and secret are required.[/red]")
            return False

    host = HostApp(cfg.get("app.package_name") or "pysoundcloud")
    authenticator = TabsSoundCloudAuthenticator(
        cfg.get("auth.client_id"),
        cfg.get("auth.redirect_uri"),
        host,
        browser_packages=cfg.get("browser.packages") or None,
    )

    if not authenticator.prepare_authentication_flow():
        console.print(
            "[red]could not start the login flow.[/red] "
            "[dim]check that a browser is installed and that "
            f"{authenticator.redirect_uri} is a free localhost address.[/dim]"
        )
        return False

    console.print("[dim]opening your browser for soundcloud sign-in…[/dim]")
    console.print(f"[dim]if nothing opens, visit:[/dim] {authenticator.login_url()}\n")

    try:
        code = await authenticator.wait_for_authorization_code(timeout=timeout)
    except asyncio.TimeoutError:
        console.print("[red]timed out waiting for the browser.[/red]")
        return False
    except AuthenticationError as exc:
        console.print(f"[red]auth failed: {exc}[/red]")
        return False
    finally:
        authenticator.unbind_service()

    try:
        token = await exchange_code(authenticator.config, code, cfg.get("auth.client_secret"))
    except TokenExchangeError as exc:
        console.print(f"[red]{exc}[/red]")
        return False

    token.store(cfg)
    await cfg.save()

    username = "unknown"
    try:
        async with SoundCloudClient(token.access_token, cfg.get("api.base_url")) as client:
            me = await client.get_me()
        username = me.username or username
    except ApiError as exc:
        console.print(f"[dim]could not fetch your profile: {exc}[/dim]")

    console.print(f"[green]✓ authenticated as {username}[/green]")
    return True


@click.command("login")
@click.option(
    "--timeout",
    type=float,
    default=300.0,
    show_default=True,
    help="Seconds to wait for the browser (0 waits forever).",
)
def login_cmd(timeout: float) -> None:
    """Sign in to SoundCloud and store the access token."""
    if not asyncio.run(_login(timeout or None)):
        raise SystemExit(1)
