"""PathStrategy — position checks by reading ancestor ids off the path."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from sqlalchemy import Column, Text

from acltree.domain.types import NODE, REQUESTOR_COLLECTION, RESOURCE_COLLECTION, Role
from acltree.strategies.base import Strategy
from acltree.strategies.path.models import (
    ROOT_PATH,
    PathNode,
    PathRequestorCollection,
    PathResourceCollection,
)

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, FromClause


class PathStrategy(Strategy):
    """Materialized path strategy."""

    name = "path"

    def node_columns(self) -> list[Column]:
        return [Column("path", Text, nullable=False, index=True, server_default=ROOT_PATH)]

    def role_types(self) -> dict[str, type]:
        return {
            RESOURCE_COLLECTION: PathResourceCollection,
            REQUESTOR_COLLECTION: PathRequestorCollection,
            NODE: PathNode,
        }

    def position_ids(self, role: Role, positions: Iterable[Any]) -> list[int]:
        """Every id named in the positions: the nodes themselves and their ancestors."""
        ids: set[int] = set()
        for position in positions:
            for segment in str(position).split("/"):
                if not segment:
                    continue
                if not segment.isdigit():
                    msg = f"Malformed materialized path position: {position!r}"
                    raise ValueError(msg)
                ids.add(int(segment))
        return sorted(ids)

    def ancestor_clause(
        self, role: Role, node_ids: list[int], table: FromClause
    ) -> ColumnElement[bool]:
        return table.c.id.in_(node_ids)
