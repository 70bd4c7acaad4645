"""pysoundcloud group / me — show SoundCloud resources."""

from __future__ import annotations

import asyncio
from dataclasses import asdict
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from pysoundcloud.api.client import SoundCloudClient
from pysoundcloud.auth.tokens import refresh_token_if_needed
from pysoundcloud.config.config import Config
from pysoundcloud.errors import ApiError
from pysoundcloud.models import Group, MiniUser


console = Console()


def _fields_table(title: str, values: dict[str, Any]) -> Table:
    table = Table(
        title=title,
        border_style="bright_cyan",
        header_style="bold bright_cyan",
        show_header=False,
    )
    table.add_column("Field", style="dim")
    table.add_column("Value")
    for key, value in values.items():
        if isinstance(value, dict):
            value = value.get("username") or value.get("id")
        table.add_row(key, "" if value is None else str(value))
    return table


async def _client() -> Optional[SoundCloudClient]:
    cfg = await Config.load()
    token = await refresh_token_if_needed(cfg)
    if not token:
        console.print("[red]not authenticated. run `pysoundcloud login` first.[/red]")
        return None
    return SoundCloudClient(token, cfg.get("api.base_url"))


async def _show_group(group_id: str) -> bool:
    client = await _client()
    if client is None:
        return False
    try:
        async with client:
            group: Group = await client.get_group(group_id)
    except ApiError as exc:
        console.print(f"[red]failed to fetch group {group_id}: {exc}[/red]")
        return False
    console.print(_fields_table(group.name or f"group {group_id}", asdict(group)))
    return True


async def _show_me() -> bool:
    client = await _client()
    if client is None:
        return False
    try:
        async with client:
            me: MiniUser = await client.get_me()
    except ApiError as exc:
        console.print(f"[red]failed to fetch your profile: {exc}[/red]")
        return False
    console.print(_fields_table(me.username or "me", asdict(me)))
    return True


@click.command("group")
@click.argument("group_id")
def group_cmd(group_id: str) -> None:
    """Show a SoundCloud group."""
    if not asyncio.run(_show_group(group_id)):
        raise SystemExit(1)


@click.command("me")
def me_cmd() -> None:
    """Show the authenticated user."""
    if not asyncio.run(_show_me()):
        raise SystemExit(1)
