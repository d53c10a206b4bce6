"""Adjacency-list strategy."""

from acltree.strategies.adjacency.models import (
    AdjacencyRequestorCollection,
    AdjacencyResourceCollection,
)
from acltree.strategies.adjacency.strategy import AdjacencyStrategy

__all__ = ["AdjacencyRequestorCollection", "AdjacencyResourceCollection", "AdjacencyStrategy"]
