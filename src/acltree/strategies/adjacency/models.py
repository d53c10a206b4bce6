"""Collections of the adjacency-list strategy.

Nodes keep nothing but their parent id, so moving a node is a single
update and its subtree follows for free.
"""

from __future__ import annotations

from sqlalchemy import insert, update

from acltree.models.collection import (
    AccessControlCollection,
    RequestorCollection,
    ResourceCollection,
)
from acltree.models.node import AclNode


class AdjacencyCollection(AccessControlCollection):
    """Node creation and moves for parent-pointer trees."""

    node_type = AclNode

    def _insert_node(self, collection_id: int | None, parent: AclNode | None) -> AclNode:
        nodes = self.tables.nodes
        parent_id = parent.id if parent is not None else None
        with self._store.transaction() as conn:
            result = conn.execute(
                insert(nodes).values(collection_id=collection_id, parent_id=parent_id)
            )
        return AclNode(
            id=int(result.inserted_primary_key[0]),
            collection_id=collection_id,
            parent_id=parent_id,
            role=self.role,
        )

    def _move_node(self, node: AclNode, parent: AclNode | None) -> None:
        nodes = self.tables.nodes
        with self._store.transaction() as conn:
            conn.execute(
                update(nodes)
                .where(nodes.c.id == node.id)
                .values(parent_id=parent.id if parent is not None else None)
            )


class AdjacencyResourceCollection(AdjacencyCollection, ResourceCollection):
    """Resource collection stored as an adjacency list."""


class AdjacencyRequestorCollection(AdjacencyCollection, RequestorCollection):
    """Requestor collection stored as an adjacency list."""
