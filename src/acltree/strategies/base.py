"""Strategy contract — what every backing representation must provide.

A strategy binds the logical roles (``resource-collection``,
``requestor-collection``, ``node``) to concrete classes, contributes the
positional columns of the nodes tables, and builds the position-check
clause every permission check reduces to.

INVARIANT: for any P joined above C, the clause built from C's positions
matches P's node rows and C's own; the clause built from P's positions
never matches C's rows unless C is independently above P.
"""

from __future__ import annotations

import tomllib
from abc import ABC, abstractmethod
from collections.abc import Iterable
from importlib import resources
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import Column, false

from acltree.domain.types import Role

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, FromClause

    from acltree.config.models import StrategyConfig
    from acltree.infrastructure.database.schema import RoleTables

CONFIG_RESOURCE = "config.toml"


class Strategy(ABC):
    """Abstract base for backing representations.

    Subclasses are registered through the ``acltree_strategies`` hook and
    instantiated once per registry with their validated configuration.
    """

    name: ClassVar[str]

    def __init__(self, config: StrategyConfig) -> None:
        self.config = config
        self._tables: dict[Role, RoleTables] | None = None

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @classmethod
    def default_config(cls) -> dict[str, Any]:
        """Read the ``config.toml`` shipped inside the strategy's package.

        Raises:
            FileNotFoundError: If the package ships no configuration.
            tomllib.TOMLDecodeError: If the file is not valid TOML.
        """
        package = cls.__module__.rpartition(".")[0] or cls.__module__
        resource = resources.files(package).joinpath(CONFIG_RESOURCE)
        return tomllib.loads(resource.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # Schema binding
    # ------------------------------------------------------------------

    def bind(self, tables: dict[Role, RoleTables]) -> None:
        """Attach the tables built from :meth:`node_columns`."""
        self._tables = tables

    def tables(self, role: Role | str) -> RoleTables:
        if self._tables is None:
            msg = f"Strategy {self.name!r} is not bound to any tables yet"
            raise RuntimeError(msg)
        return self._tables[Role(role)]

    def node_table(self, role: Role | str, table: FromClause | str | None = None) -> FromClause:
        """Return *table*, or an alias of the role's nodes table when given a name."""
        nodes = self.tables(role).nodes
        if table is None:
            return nodes
        if isinstance(table, str):
            return nodes.alias(table)
        return table

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    @abstractmethod
    def node_columns(self) -> list[Column]:
        """Positional columns added to each role's nodes table."""

    @abstractmethod
    def role_types(self) -> dict[str, type]:
        """Map unprefixed role names to the strategy's concrete classes."""

    @abstractmethod
    def position_ids(self, role: Role, positions: Iterable[Any]) -> list[int]:
        """Sorted, distinct node ids the positions name directly."""

    @abstractmethod
    def ancestor_clause(
        self, role: Role, node_ids: list[int], table: FromClause
    ) -> ColumnElement[bool]:
        """Clause over *table* matching ancestors-or-self of *node_ids*."""

    def add_position_check(
        self,
        positions: Iterable[Any],
        role: Role | str,
        table: FromClause | str = "t",
    ) -> ColumnElement[bool]:
        """Build a clause matching every row at or above any of *positions*.

        Args:
            positions: Markers from ``fetch_comprised_positions()``.
            role: ``resource`` or ``requestor``.
            table: The role's nodes table, an alias of it, or an alias name.

        An empty position set yields ``false()``; positions without rows
        simply match nothing.
        """
        role = Role(role)
        target = self.node_table(role, table)
        node_ids = self.position_ids(role, positions)
        if not node_ids:
            return false()
        return self.ancestor_clause(role, node_ids, target)
