"""Pluggable backing representations for the hierarchy.

Each strategy is a package holding its ``config.toml``, its concrete
collection/node classes and its :class:`~acltree.strategies.base.Strategy`.
"""

from acltree.strategies.base import Strategy
from acltree.strategies.registry import StrategyRegistry

__all__ = ["Strategy", "StrategyRegistry"]
