"""Built-in strategies, registered like any third-party plugin."""

from __future__ import annotations

from acltree.strategies.adjacency import AdjacencyStrategy
from acltree.strategies.base import Strategy
from acltree.strategies.hookspecs import hookimpl
from acltree.strategies.path import PathStrategy


class BuiltinStrategies:
    """Materialized path (default) and adjacency list."""

    @hookimpl
    def acltree_strategies(self) -> list[type[Strategy]]:
        return [PathStrategy, AdjacencyStrategy]
