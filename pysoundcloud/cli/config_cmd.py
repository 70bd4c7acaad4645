"""pysoundcloud config — view and change the stored settings and tokens."""

from __future__ import annotations

import asyncio
import json
import os
import subprocess

import click
from rich.console import Console
from rich.syntax import Syntax
from rich.panel import Panel

from pysoundcloud.config.config import Config


console = Console()

# Never printed in full by `config show`.
_SECRET_KEYS = ("client_secret", "access_token", "refresh_token")


def _mask(value: object) -> str:
    return str(value)[:4] + "****"


def _masked(data: dict) -> dict:
    auth = dict(data.get("auth", {}))
    for key in _SECRET_KEYS:
        if auth.get(key):
            auth[key] = _mask(auth[key])
    return {**data, "auth": auth}


def _check_key(key: str) -> None:
    if not Config.is_known_key(key):
        console.print(f"[red]unknown setting:[/red] {key}")
        console.print("[dim]run `pysoundcloud config show` to list the settings.[/dim]")
        raise SystemExit(1)


async def _show_config() -> None:
    """Pretty-print the settings with credentials and tokens masked."""
    cfg = await Config.load()
    raw = json.dumps(_masked(cfg.data), indent=2, default=str)
    syntax = Syntax(raw, "json", theme="monokai", line_numbers=True)
    console.print(Panel(syntax, title=str(cfg.path), border_style="bright_cyan"))
    if not cfg.has_credentials():
        console.print("[yellow]auth.client_id and auth.client_secret are not set.[/yellow]")


async def _open_config() -> None:
    cfg = await Config.load()
    await cfg.save()  # the editor needs a file to open
    editor = os.environ.get("EDITOR", "nano")
    subprocess.call([editor, str(cfg.path)])


async def _set_value(key: str, value: str) -> None:
    cfg = await Config.load()

    # Lists and booleans are given as JSON; anything else is kept as text.
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value

    cfg.set(key, parsed)
    await cfg.save()
    shown = _mask(parsed) if key.split(".")[-1] in _SECRET_KEYS and parsed else parsed
    console.print(f"[green]✓[/green] set [bold]{key}[/bold] = {shown!r}")


async def _unset_value(key: str) -> None:
    cfg = await Config.load()
    if not cfg.unset(key):
        console.print(f"[dim]{key} is not set.[/dim]")
        return
    await cfg.save()
    console.print(f"[green]✓[/green] {key} restored to {cfg.get(key)!r}")


async def _reset_config() -> None:
    await Config.defaults().save()
    console.print("[green]✓[/green] config reset to defaults.")


@click.command("config")
@click.argument("action", required=False, default=None)
@click.argument("args", nargs=-1)
def config_cmd(action: str | None, args: tuple[str, ...]) -> None:
    """View or edit the pysoundcloud configuration.

    \b
    Actions:
      (none)    open config in $EDITOR
      show      pretty-print current config
      path      print the config file location
      set K V   set a setting
      unset K   restore a setting to its default
      reset     restore defaults, dropping stored tokens
    """
    if action is None:
        asyncio.run(_open_config())
    elif action == "show":
        asyncio.run(_show_config())
    elif action == "path":
        click.echo(str(Config.config_path()))
    elif action == "set":
        if len(args) < 2:
            console.print("[red]usage:[/red] pysoundcloud config set <key> <value>")
            raise SystemExit(1)
        _check_key(args[0])
        asyncio.run(_set_value(args[0], " ".join(args[1:])))
    elif action == "unset":
        if len(args) != 1:
            console.print("[red]usage:[/red] pysoundcloud config unset <key>")
            raise SystemExit(1)
        _check_key(args[0])
        asyncio.run(_unset_value(args[0]))
    elif action == "reset":
        asyncio.run(_reset_config())
    else:
        console.print(f"[red]unknown action:[/red] {action}")
        raise SystemExit(1)
