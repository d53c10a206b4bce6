"""Subcommand modules for acltree.

Provides register_commands(), which imports command modules lazily so
``acltree --help`` stays fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the collection group and the standalone commands on *cli*."""
    from acltree.commands.collection import collection

    cli.add_command(collection)

    from acltree.commands.init_cmd import init_cmd
    from acltree.commands.membership import is_cmd, join, leave

    cli.add_command(init_cmd)
    cli.add_command(join)
    cli.add_command(leave)
    cli.add_command(is_cmd)
