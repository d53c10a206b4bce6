"""Command group: create and inspect collections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from acltree.commands._base import AclGroup
from acltree.commands._context import parse_identifier
from acltree.services.collections import CollectionService

if TYPE_CHECKING:
    from acltree.commands._context import AppContext

ROLE_OPTION = click.option(
    "--role",
    type=click.Choice(["resource", "requestor"], case_sensitive=False),
    default="requestor",
    show_default=True,
    help="Which hierarchy to work on.",
)

_COLLECTION_EXAMPLES = """\
  acltree collection create employees
  acltree collection create --model User --key 42
  acltree collection show managers
  acltree collection tree --role resource
  acltree --json collection ancestors User:42"""


@click.group(cls=AclGroup, examples=_COLLECTION_EXAMPLES)
def collection() -> None:
    """Create and inspect collections."""


@collection.command(
    examples="""\
  acltree collection create employees
  acltree collection create --role resource documents
  acltree collection create --model User --key 42"""
)
@click.argument("alias", required=False)
@click.option("--model", default=None, help="Domain model name of the wrapped record.")
@click.option("--key", "foreign_key", default=None, help="Primary key of the wrapped record.")
@ROLE_OPTION
@click.pass_obj
def create(
    app: AppContext,
    alias: str | None,
    model: str | None,
    foreign_key: str | None,
    role: str,
) -> None:
    """Create a collection by alias or by model reference."""
    if alias is not None and (model or foreign_key):
        raise click.UsageError("Pass either an alias or --model/--key, not both.")
    if (model is None) != (foreign_key is None):
        raise click.UsageError("--model and --key must be given together.")
    service = CollectionService(app.store)
    app.emit(service.create(role, alias=alias, model=model, foreign_key=foreign_key))


@collection.command(
    examples="""\
  acltree collection show managers
  acltree collection show --role resource Document:7"""
)
@click.argument("identifier")
@ROLE_OPTION
@click.pass_obj
def show(app: AppContext, identifier: str, role: str) -> None:
    """Show nodes, positions, parents and children of a collection."""
    app.emit(CollectionService(app.store).show(role, parse_identifier(identifier)))


@collection.command(
    examples="""\
  acltree collection ancestors User:42
  acltree -q collection ancestors interns"""
)
@click.argument("identifier")
@ROLE_OPTION
@click.pass_obj
def ancestors(app: AppContext, identifier: str, role: str) -> None:
    """List every group a collection belongs to, directly or not."""
    app.emit(CollectionService(app.store).ancestors(role, parse_identifier(identifier)))


@collection.command(
    examples="""\
  acltree collection tree
  acltree --json collection tree --role resource"""
)
@ROLE_OPTION
@click.pass_obj
def tree(app: AppContext, role: str) -> None:
    """Print the collection hierarchy of one role."""
    app.emit(CollectionService(app.store).tree(role))
