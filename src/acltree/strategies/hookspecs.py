"""Pluggy hook specifications for strategy discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from acltree.strategies.base import Strategy

PROJECT_NAME = "acltree"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class AcltreeHookSpec:
    """Hook specifications for the acltree plugin system."""

    @hookspec
    def acltree_strategies(self) -> list[type[Strategy]] | None:
        """Return the strategy classes this plugin provides."""
