"""CollectionService — create, inspect and list collections."""

from __future__ import annotations

from typing import Any

from acltree.domain.errors import AclError
from acltree.domain.types import Role
from acltree.services.base import BaseService
from acltree.services.result import ServiceResult
from acltree.services.telemetry import traced


class CollectionService(BaseService):
    """Read-mostly operations on single collections and whole hierarchies."""

    @traced
    def create(
        self,
        role: Role | str,
        *,
        alias: str | None = None,
        model: str | None = None,
        foreign_key: Any = None,
    ) -> ServiceResult:
        """Create a collection unless one with the same identity exists."""
        try:
            with self._store.transaction():
                collection_type = self._store.collection_type(role)
                # The constructor rejects half an external reference before any lookup.
                candidate = collection_type(
                    self._store, alias=alias, model=model, foreign_key=foreign_key
                )
                existing = None
                if alias is not None or model is not None:
                    existing = collection_type.find(
                        self._store, alias=alias, model=model, foreign_key=foreign_key
                    )
                if existing is not None:
                    return ServiceResult(
                        ok=True,
                        op="create",
                        data=existing.to_dict(),
                        warnings=[f"{existing.label!r} already exists"],
                    )
                candidate.save()
                data = candidate.to_dict()
        except AclError as exc:
            return self._failure("create", exc, alias=alias, model=model)
        return ServiceResult(ok=True, op="create", data=data)

    @traced
    def show(self, role: Role | str, identifier: Any) -> ServiceResult:
        """Nodes, positions and one-hop neighbours of a collection."""
        try:
            with self._store.transaction():
                collection = self._store.resolve(identifier, role)
                data = {
                    **collection.to_dict(),
                    "nodes": [
                        {"id": n.id, "parent_id": n.parent_id, "position": n.position}
                        for n in collection.get_nodes()
                    ],
                    "positions": collection.fetch_comprised_positions(),
                    "parents": [c.label for c in collection.get_parent_objects()],
                    "children": [c.label for c in collection.get_child_objects()],
                }
        except AclError as exc:
            return self._failure("show", exc, identifier=str(identifier))
        return ServiceResult(ok=True, op="show", data=data)

    @traced
    def ancestors(self, role: Role | str, identifier: Any) -> ServiceResult:
        """Every collection the given one is transitively a member of."""
        try:
            collection = self._store.resolve(identifier, role)
        except AclError as exc:
            return self._failure("ancestors", exc, identifier=str(identifier))
        graph = self._store.graph
        ids = graph.ancestors(role, collection.id)
        labels = [graph.graph(role).nodes[i]["label"] for i in sorted(ids)]
        return ServiceResult(
            ok=True,
            op="ancestors",
            data={"collection": collection.label, "count": len(labels), "items": labels},
        )

    @traced
    def tree(self, role: Role | str) -> ServiceResult:
        """The collection hierarchy of *role* as nested dicts."""
        role = Role(role)
        graph = self._store.graph
        g = graph.graph(role)

        def _subtree(collection_id: int, trail: frozenset[int]) -> dict[str, Any]:
            children = sorted(g.successors(collection_id))
            return {
                "id": collection_id,
                "label": g.nodes[collection_id]["label"],
                "children": [
                    _subtree(child, trail | {child}) for child in children if child not in trail
                ],
            }

        roots = [_subtree(root, frozenset({root})) for root in graph.roots(role)]
        return ServiceResult(
            ok=True,
            op="tree",
            data={"role": str(role), "count": g.number_of_nodes(), "items": roots},
        )
