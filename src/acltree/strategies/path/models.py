"""Collections and nodes of the materialized path strategy.

Every node stores the chain of its ancestor ids, ``/`` delimited and
``/`` terminated (``"/"`` for a free node, ``"/1/5/"`` below node 5 below
node 1). A node's position is its path followed by its own id, so the
ancestors-or-self of a position can be read straight from the string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, literal, update

from acltree.models.collection import (
    AccessControlCollection,
    RequestorCollection,
    ResourceCollection,
)
from acltree.models.node import AclNode

if TYPE_CHECKING:
    from sqlalchemy import Row

    from acltree.domain.types import Role

ROOT_PATH = "/"


def position_of(path: str, node_id: int) -> str:
    return f"{path}{node_id}/"


@dataclass(frozen=True)
class PathNode(AclNode):
    """Node carrying its ancestor path."""

    path: str = ROOT_PATH

    @property
    def position(self) -> str:
        return position_of(self.path, self.id)

    @classmethod
    def from_row(cls, row: Row[Any], role: Role) -> PathNode:
        return cls(
            id=row.id,
            collection_id=row.collection_id,
            parent_id=row.parent_id,
            role=role,
            path=row.path,
        )


class PathCollection(AccessControlCollection):
    """Node creation and moves for materialized paths."""

    node_type = PathNode

    def _insert_node(self, collection_id: int | None, parent: AclNode | None) -> PathNode:
        nodes = self.tables.nodes
        path = parent.position if parent is not None else ROOT_PATH
        parent_id = parent.id if parent is not None else None
        with self._store.transaction() as conn:
            result = conn.execute(
                insert(nodes).values(collection_id=collection_id, parent_id=parent_id, path=path)
            )
        return PathNode(
            id=int(result.inserted_primary_key[0]),
            collection_id=collection_id,
            parent_id=parent_id,
            role=self.role,
            path=path,
        )

    def _move_node(self, node: AclNode, parent: AclNode | None) -> None:
        assert isinstance(node, PathNode)
        nodes = self.tables.nodes
        new_path = parent.position if parent is not None else ROOT_PATH
        old_position = node.position
        new_position = position_of(new_path, node.id)
        with self._store.transaction() as conn:
            conn.execute(
                update(nodes)
                .where(nodes.c.id == node.id)
                .values(parent_id=parent.id if parent is not None else None, path=new_path)
            )
            # Rewrite the prefix of every descendant's path.
            conn.execute(
                update(nodes)
                .where(nodes.c.path.startswith(old_position))
                .values(
                    path=literal(new_position)
                    + func.substr(nodes.c.path, len(old_position) + 1)
                )
            )


class PathResourceCollection(PathCollection, ResourceCollection):
    """Resource collection stored with materialized paths."""


class PathRequestorCollection(PathCollection, RequestorCollection):
    """Requestor collection stored with materialized paths."""
