"""Collection-level hierarchy graph (NetworkX)."""

from acltree.infrastructure.graph.engine import HierarchyGraph

__all__ = ["HierarchyGraph"]
