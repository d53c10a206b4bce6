"""HierarchyGraph — lazy-built NetworkX view of collection memberships.

Nodes are collection ids; an edge ``parent -> child`` exists when a node
of the child sits directly under a node of the parent. Built per role on
first access and dropped whenever a store transaction ends. Membership
checks never use it; it backs reporting (trees, ancestor listings).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import networkx as nx
from sqlalchemy import select

from acltree.domain.types import Role

if TYPE_CHECKING:
    from acltree.infrastructure.store import Store

type _Graph = nx.DiGraph


class HierarchyGraph:
    """Per-role cache of collection-level DiGraphs."""

    def __init__(self, store: Store) -> None:
        self._store = store
        self._graphs: dict[Role, _Graph] = {}

    def graph(self, role: Role | str) -> _Graph:
        """Return the graph for *role*, building it from the DB on first access."""
        role = Role(role)
        if role not in self._graphs:
            self._graphs[role] = self._build_from_db(role)
        return self._graphs[role]

    def invalidate(self) -> None:
        """Clear cached graphs, forcing a rebuild on next access."""
        self._graphs.clear()

    def ancestors(self, role: Role | str, collection_id: int) -> set[int]:
        g = self.graph(role)
        if collection_id not in g:
            return set()
        return set(nx.ancestors(g, collection_id))

    def descendants(self, role: Role | str, collection_id: int) -> set[int]:
        g = self.graph(role)
        if collection_id not in g:
            return set()
        return set(nx.descendants(g, collection_id))

    def roots(self, role: Role | str) -> list[int]:
        g = self.graph(role)
        return sorted(n for n in g.nodes if g.in_degree(n) == 0)

    def _build_from_db(self, role: Role) -> _Graph:
        """Load all collections first (so isolated ones appear), then edges."""
        tables = self._store.tables(role)
        collections, nodes = tables.collections, tables.nodes
        parent = nodes.alias("parent")

        g: _Graph = nx.DiGraph()
        with self._store.engine.connect() as conn:
            for row in conn.execute(select(collections).order_by(collections.c.id)):
                label = row.alias or (
                    f"{row.model}:{row.foreign_key}" if row.model else f"#{row.id}"
                )
                g.add_node(
                    row.id,
                    label=label,
                    alias=row.alias,
                    model=row.model,
                    foreign_key=row.foreign_key,
                )

            stmt = (
                select(parent.c.collection_id.label("parent_id"), nodes.c.collection_id)
                .select_from(nodes.join(parent, nodes.c.parent_id == parent.c.id))
                .distinct()
            )
            for row in conn.execute(stmt):
                g.add_edge(row.parent_id, row.collection_id)
        return g
