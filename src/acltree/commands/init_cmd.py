"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from acltree.commands._base import AclCommand

if TYPE_CHECKING:
    from acltree.commands._context import AppContext

_INIT_EXAMPLES = """\
  acltree init
  acltree init /srv/app --strategy adjacency
  acltree init . --force"""


@click.command("init", cls=AclCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option(
    "--strategy",
    "strategy_name",
    default=None,
    help="Hierarchy strategy to record in acltree.toml (default: path).",
)
@click.option("--force", is_flag=True, help="Overwrite an existing acltree.toml.")
@click.pass_obj
def init_cmd(app: AppContext, path: str, strategy_name: str | None, force: bool) -> None:
    """Create acltree.toml and the database."""
    from acltree.services.init import InitService

    strategy = strategy_name or app.settings.strategy.name
    app.emit(InitService.init_project(Path(path).resolve(), strategy=strategy, force=force))
