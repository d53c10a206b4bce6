"""``acltree`` entry point: global output flags and subcommand wiring."""

from __future__ import annotations

from typing import Any

import click

from acltree import __version__
from acltree.commands import register_commands
from acltree.commands._context import AppContext
from acltree.config.settings import AclSettings
from acltree.domain.errors import ConfigurationError


def _load_settings(**options: Any) -> AclSettings:
    try:
        return AclSettings.from_cli(**options)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="acltree")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only the essential result.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and timing spans.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option(
    "-c",
    "--config",
    "config_path",
    metavar="FILE",
    default=None,
    help="Use FILE instead of the nearest acltree.toml.",
)
@click.option(
    "--strategy",
    "strategy_name",
    metavar="NAME",
    default=None,
    help="Hierarchy strategy to open the database with (path, adjacency, ...).",
)
@click.pass_context
def cli(ctx: click.Context, **options: Any) -> None:
    """acltree — hierarchical resource and requestor groups for access control."""
    ctx.obj = AppContext(_load_settings(**options))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
