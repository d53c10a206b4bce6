"""SQLAlchemy Core table definitions for collections and nodes.

The tables are built per store: each role gets a collections table and a
nodes table, and the active strategy contributes the positional columns of
the nodes table. Nodes written by one strategy are never read by another,
so a database file is bound to the strategy that created it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from sqlalchemy import (
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

from acltree.domain.types import Role

# alias XOR (model, foreign_key) XOR neither; the pair is all-or-nothing.
_IDENTITY_CHECK = (
    "(model IS NULL) = (foreign_key IS NULL) AND (alias IS NULL OR model IS NULL)"
)


@dataclass(frozen=True)
class RoleTables:
    """The pair of tables backing one role."""

    collections: Table
    nodes: Table


def collections_table(metadata: MetaData, role: Role) -> Table:
    """Build the ``<role>_collections`` table."""
    name = f"{role}_collections"
    table = Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column("alias", Text),
        Column("model", Text),
        Column("foreign_key", Text),
        CheckConstraint(_IDENTITY_CHECK, name=f"ck_{name}_identity"),
    )
    Index(f"ix_{name}_alias", table.c.alias)
    Index(f"ix_{name}_model_fk", table.c.model, table.c.foreign_key)
    return table


def nodes_table(metadata: MetaData, role: Role, extra_columns: Iterable[Column]) -> Table:
    """Build the ``<role>_nodes`` table with the strategy's positional columns."""
    name = f"{role}_nodes"
    table = Table(
        name,
        metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        Column(
            "collection_id",
            Integer,
            ForeignKey(f"{role}_collections.id"),
            nullable=False,
        ),
        Column("parent_id", Integer, ForeignKey(f"{name}.id")),
        *extra_columns,
    )
    Index(f"ix_{name}_collection", table.c.collection_id)
    Index(f"ix_{name}_parent", table.c.parent_id)
    return table


def build_tables(
    metadata: MetaData,
    node_columns: Callable[[], Iterable[Column]] | None = None,
) -> dict[Role, RoleTables]:
    """Build collections + nodes tables for both roles on *metadata*.

    *node_columns* is called once per role since a Column may belong to
    one table only.
    """
    tables: dict[Role, RoleTables] = {}
    for role in Role:
        tables[role] = RoleTables(
            collections=collections_table(metadata, role),
            nodes=nodes_table(metadata, role, node_columns() if node_columns else []),
        )
    return tables
