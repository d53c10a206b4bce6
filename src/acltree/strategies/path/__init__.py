"""Materialized path strategy."""

from acltree.strategies.path.models import (
    PathNode,
    PathRequestorCollection,
    PathResourceCollection,
)
from acltree.strategies.path.strategy import PathStrategy

__all__ = ["PathNode", "PathRequestorCollection", "PathResourceCollection", "PathStrategy"]
