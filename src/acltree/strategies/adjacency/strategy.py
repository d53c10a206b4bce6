"""AdjacencyStrategy — position checks through a recursive CTE.

Positions are plain node ids. The check walks ``parent_id`` upwards from
the given nodes; UNION (not UNION ALL) keeps the walk finite.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, select

from acltree.domain.types import NODE, REQUESTOR_COLLECTION, RESOURCE_COLLECTION, Role
from acltree.models.node import AclNode
from acltree.strategies.adjacency.models import (
    AdjacencyRequestorCollection,
    AdjacencyResourceCollection,
)
from acltree.strategies.base import Strategy

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, FromClause


class AdjacencyStrategy(Strategy):
    """Adjacency-list strategy."""

    name = "adjacency"

    def node_columns(self) -> list[Column]:
        return []

    def role_types(self) -> dict[str, type]:
        return {
            RESOURCE_COLLECTION: AdjacencyResourceCollection,
            REQUESTOR_COLLECTION: AdjacencyRequestorCollection,
            NODE: AclNode,
        }

    def position_ids(self, role: Role, positions: Iterable[Any]) -> list[int]:
        try:
            return sorted({int(position) for position in positions})
        except (TypeError, ValueError) as exc:
            msg = f"Malformed adjacency position in {positions!r}"
            raise ValueError(msg) from exc

    def ancestor_clause(
        self, role: Role, node_ids: list[int], table: FromClause
    ) -> ColumnElement[bool]:
        nodes = self.tables(role).nodes
        ancestors = (
            select(nodes.c.id, nodes.c.parent_id)
            .where(nodes.c.id.in_(node_ids))
            .cte(recursive=True)
        )
        parent = nodes.alias()
        ancestors = ancestors.union(
            select(parent.c.id, parent.c.parent_id).where(parent.c.id == ancestors.c.parent_id)
        )
        return table.c.id.in_(select(ancestors.c.id))
