"""Commands: join, leave, is."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from acltree.commands._base import AclCommand
from acltree.commands._context import parse_identifier
from acltree.commands.collection import ROLE_OPTION
from acltree.services.membership import MembershipService

if TYPE_CHECKING:
    from acltree.commands._context import AppContext


@click.command(
    cls=AclCommand,
    examples="""\
  acltree join managers employees
  acltree join User:42 managers
  acltree join --role resource Document:7 handbooks""",
)
@click.argument("member")
@click.argument("group")
@ROLE_OPTION
@click.pass_obj
def join(app: AppContext, member: str, group: str, role: str) -> None:
    """Make MEMBER a direct member of GROUP."""
    service = MembershipService(app.store)
    app.emit(service.join(role, parse_identifier(member), parse_identifier(group)))


@click.command(
    cls=AclCommand,
    examples="""\
  acltree leave managers employees
  acltree leave --role resource Document:7 handbooks""",
)
@click.argument("member")
@click.argument("group")
@ROLE_OPTION
@click.pass_obj
def leave(app: AppContext, member: str, group: str, role: str) -> None:
    """Remove the direct membership of MEMBER in GROUP."""
    service = MembershipService(app.store)
    app.emit(service.leave(role, parse_identifier(member), parse_identifier(group)))


@click.command(
    "is",
    cls=AclCommand,
    examples="""\
  acltree is User:42 employees
  acltree -q is --exit-code managers employees && echo allowed""",
)
@click.argument("member")
@click.argument("group")
@click.option("--exit-code", is_flag=True, help="Exit with status 2 when the answer is no.")
@ROLE_OPTION
@click.pass_obj
def is_cmd(app: AppContext, member: str, group: str, exit_code: bool, role: str) -> None:
    """Check whether MEMBER is GROUP or lies anywhere below it."""
    result = MembershipService(app.store).check(
        role, parse_identifier(member), parse_identifier(group)
    )
    app.emit(result)
    if exit_code and not result.data.get("result"):
        raise SystemExit(2)
