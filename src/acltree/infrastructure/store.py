"""Store — one engine, one strategy, one set of tables.

The Store is the single dependency handed to every collection and
service. It initializes the strategy registry, builds the role tables from
the strategy's column contract, binds the strategy to them, and owns the
transaction boundary:

- **DB**: native SQLAlchemy ``engine.begin()`` with auto-commit/rollback.
  Nested :meth:`transaction` calls join the outermost one, so a caller can
  make "resolve → persist → mutate" atomic by wrapping it.
- **Graph**: the hierarchy graph cache is invalidated when the outermost
  transaction ends (success or failure).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from sqlalchemy import MetaData

from acltree.config.settings import AclSettings
from acltree.domain.types import Role
from acltree.infrastructure.database.engine import init_database
from acltree.infrastructure.database.schema import RoleTables, build_tables
from acltree.infrastructure.graph.engine import HierarchyGraph
from acltree.models.resolver import IdentifierResolver, RoleSpec
from acltree.strategies.registry import StrategyRegistry

if TYPE_CHECKING:
    from sqlalchemy import Connection
    from sqlalchemy.engine import Engine

    from acltree.models.collection import AccessControlCollection
    from acltree.strategies.base import Strategy

logger = logging.getLogger(__name__)

type RecordLoader = Callable[[str], Any]


class Store:
    """Repository binding collections to storage.

    Usage::

        store = Store(AclSettings.from_cli(root=path))
        managers = store.resolve("managers", Role.REQUESTOR)
        with store.transaction():
            managers.join("employees")
    """

    def __init__(
        self,
        settings: AclSettings | None = None,
        *,
        registry: StrategyRegistry | None = None,
    ) -> None:
        self._settings = settings or AclSettings.from_cli()
        self._registry = registry or StrategyRegistry.from_settings(self._settings)
        self._registry.initialize()

        strategy = self._registry.strategy
        self._metadata = MetaData()
        self._tables = build_tables(self._metadata, strategy.node_columns)
        strategy.bind(self._tables)

        self._engine: Engine = init_database(
            self._settings.database_url,
            self._metadata,
            echo=self._settings.database.echo,
        )
        self._active: ContextVar[Connection | None] = ContextVar(
            f"acltree_store_{id(self)}", default=None
        )
        self._resolver = IdentifierResolver(self)
        self._graph = HierarchyGraph(self)
        self._record_loaders: dict[str, RecordLoader] = {}
        logger.debug("Store opened on %s with strategy %s", self._engine.url, strategy.name)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def settings(self) -> AclSettings:
        return self._settings

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def metadata(self) -> MetaData:
        return self._metadata

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    @property
    def strategy(self) -> Strategy:
        return self._registry.strategy

    @property
    def resolver(self) -> IdentifierResolver:
        return self._resolver

    @property
    def graph(self) -> HierarchyGraph:
        """Collection-level hierarchy graph (lazy-built from committed rows)."""
        return self._graph

    def tables(self, role: Role | str) -> RoleTables:
        return self._tables[Role(role)]

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @property
    def in_transaction(self) -> bool:
        return self._active.get() is not None

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Yield the active connection, opening a transaction if none is active.

        **Warning:** do not read ``store.graph`` inside a transaction; it is
        built from committed state only.
        """
        current = self._active.get()
        if current is not None:
            yield current
            return

        with self._engine.begin() as conn:
            token = self._active.set(conn)
            try:
                yield conn
            finally:
                self._active.reset(token)
                self._graph.invalidate()

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def collection_type(self, role: RoleSpec) -> type[AccessControlCollection]:
        return self._resolver.collection_type(role)

    def create_collection(
        self,
        role: RoleSpec,
        *,
        alias: str | None = None,
        model: str | None = None,
        foreign_key: Any = None,
    ) -> AccessControlCollection:
        """Create and persist a new collection (no lookup, no dedup)."""
        collection = self.collection_type(role)(
            self, alias=alias, model=model, foreign_key=foreign_key
        )
        collection.save()
        return collection

    def resolve(self, identifier: Any, role: RoleSpec, *, only_first: bool = True) -> Any:
        """Shortcut for :meth:`IdentifierResolver.resolve`."""
        return self._resolver.resolve(identifier, role, only_first=only_first)

    def find_by_pk(self, role: RoleSpec, pk: int) -> AccessControlCollection | None:
        return self.collection_type(role).find_by_pk(self, pk)

    def all_collections(self, role: RoleSpec) -> list[AccessControlCollection]:
        return self.collection_type(role).find_all(self)

    # ------------------------------------------------------------------
    # Domain records
    # ------------------------------------------------------------------

    def register_record_loader(self, model: str, loader: RecordLoader) -> None:
        """Register how to load records of *model* by foreign key."""
        self._record_loaders[model] = loader

    def record_loader(self, model: str) -> RecordLoader | None:
        return self._record_loaders.get(model)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Dispose the engine and tear down the registry."""
        self._engine.dispose()
        self._registry.close()

    def __enter__(self) -> Store:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
