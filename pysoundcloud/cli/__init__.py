"""pysoundcloud CLI — main entry point.

Registers all subcommands under the ``pysoundcloud`` group.
"""

from __future__ import annotations

import logging

import click

from pysoundcloud.cli.config_cmd import config_cmd
from pysoundcloud.cli.login_cmd import login_cmd
from pysoundcloud.cli.resources_cmd import group_cmd, me_cmd


@click.group(invoke_without_command=True)
@click.version_option(package_name="pysoundcloud")
@click.option("-v", "--verbose", is_flag=True, help="Log what the SDK is doing.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """pysoundcloud — SoundCloud from the terminal."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(login_cmd, "login")
cli.add_command(config_cmd, "config")
cli.add_command(group_cmd, "group")
cli.add_command(me_cmd, "me")


def main() -> None:
    """Package entry point."""
    cli()
