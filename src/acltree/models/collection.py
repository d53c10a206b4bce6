"""AccessControlCollection — the entity every membership operation goes through.

A collection is a named group of resources or requestors. It owns one or
more nodes; each node is one position in the role's hierarchy. Joining a
group places a node of the collection under every node of the group, so
every descendant of the collection also becomes a descendant of the group.

The join/leave/is algorithms live here and are shared by all strategies.
Concrete strategies only supply node creation, node moves, and the
position check (see :mod:`acltree.strategies.base`).

INVARIANT: resolve, then persist, then mutate. No relationship ever
references an unsaved collection.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, ClassVar, Self

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from acltree.domain.errors import CycleError, InvalidIdentifier, PersistenceError
from acltree.domain.records import DomainRecord
from acltree.domain.types import Role
from acltree.models.node import AclNode

if TYPE_CHECKING:
    from sqlalchemy import ColumnElement, FromClause

    from acltree.infrastructure.database.schema import RoleTables
    from acltree.infrastructure.store import Store

logger = logging.getLogger(__name__)


class AccessControlCollection(ABC):
    """Abstract collection of either role.

    Attributes:
        alias: Optional human-readable name.
        model: Type name of the wrapped domain record, if any.
        foreign_key: Primary key of the wrapped domain record, as text.
    """

    role: ClassVar[Role]
    node_type: ClassVar[type[AclNode]] = AclNode

    def __init__(
        self,
        store: Store,
        *,
        alias: str | None = None,
        model: str | None = None,
        foreign_key: Any = None,
        id: int | None = None,
    ) -> None:
        if (model is None) != (foreign_key is None):
            raise InvalidIdentifier("'model' and 'foreign_key' must be set together")
        if alias is not None and model is not None:
            raise InvalidIdentifier("A collection has either an alias or a model reference")
        self._store = store
        self._id = id
        self.alias = alias
        self.model = model
        self.foreign_key = None if foreign_key is None else str(foreign_key)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @property
    def id(self) -> int | None:
        return self._id

    @property
    def is_new_record(self) -> bool:
        return self._id is None

    @property
    def store(self) -> Store:
        return self._store

    @property
    def tables(self) -> RoleTables:
        return self._store.tables(self.role)

    @property
    def label(self) -> str:
        """Display name: alias, ``model:key``, or ``#id``."""
        if self.alias is not None:
            return self.alias
        if self.model is not None:
            return f"{self.model}:{self.foreign_key}"
        return f"#{self._id}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccessControlCollection):
            return NotImplemented
        if self._id is None or other._id is None:
            return self is other
        return self.role == other.role and self._id == other._id

    def __hash__(self) -> int:
        # The hash would change on first save.
        if self._id is None:
            msg = f"unhashable unsaved {type(self).__name__}: save() it first"
            raise TypeError(msg)
        return hash((self.role, self._id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, label={self.label!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "role": str(self.role),
            "alias": self.alias,
            "model": self.model,
            "foreign_key": self.foreign_key,
        }

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @classmethod
    def _from_row(cls, store: Store, row: Any) -> Self:
        return cls(
            store,
            alias=row.alias,
            model=row.model,
            foreign_key=row.foreign_key,
            id=row.id,
        )

    @classmethod
    def find_all(
        cls,
        store: Store,
        *,
        alias: str | None = None,
        model: str | None = None,
        foreign_key: Any = None,
    ) -> list[Self]:
        """All collections matching the given filters, oldest first."""
        table = store.tables(cls.role).collections
        stmt = select(table).order_by(table.c.id)
        if alias is not None:
            stmt = stmt.where(table.c.alias == alias)
        if model is not None:
            stmt = stmt.where(table.c.model == model)
        if foreign_key is not None:
            stmt = stmt.where(table.c.foreign_key == str(foreign_key))
        with store.transaction() as conn:
            rows = conn.execute(stmt).fetchall()
        return [cls._from_row(store, row) for row in rows]

    @classmethod
    def find(
        cls,
        store: Store,
        *,
        alias: str | None = None,
        model: str | None = None,
        foreign_key: Any = None,
    ) -> Self | None:
        """The oldest matching collection, or None."""
        found = cls.find_all(store, alias=alias, model=model, foreign_key=foreign_key)
        return found[0] if found else None

    @classmethod
    def find_by_pks(cls, store: Store, ids: Iterable[int]) -> list[Self]:
        wanted = sorted(set(ids))
        if not wanted:
            return []
        table = store.tables(cls.role).collections
        stmt = select(table).where(table.c.id.in_(wanted)).order_by(table.c.id)
        with store.transaction() as conn:
            rows = conn.execute(stmt).fetchall()
        return [cls._from_row(store, row) for row in rows]

    @classmethod
    def find_by_pk(cls, store: Store, pk: int) -> Self | None:
        found = cls.find_by_pks(store, [pk])
        return found[0] if found else None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> bool:
        """Insert or update this collection.

        The first save also creates the collection's root node, in the
        same transaction.

        Raises:
            PersistenceError: If the storage engine rejects the write.
        """
        table = self.tables.collections
        values = {"alias": self.alias, "model": self.model, "foreign_key": self.foreign_key}
        created = self._id is None
        try:
            with self._store.transaction() as conn:
                if created:
                    result = conn.execute(insert(table).values(**values))
                    self._id = int(result.inserted_primary_key[0])
                    self.create_node()
                else:
                    conn.execute(update(table).where(table.c.id == self._id).values(**values))
        except SQLAlchemyError as exc:
            if created:
                self._id = None
            msg = f"Unable to save {type(self).__name__} {self.label!r}"
            raise PersistenceError(msg) from exc
        if created:
            logger.debug("Created %s collection %s", self.role, self.label)
        return True

    @staticmethod
    def _assure_saved(*objects: Any) -> None:
        """Persist every new collection or domain record among *objects*."""
        for obj in objects:
            if obj is None:
                continue
            if isinstance(obj, AccessControlCollection):
                if obj.is_new_record:
                    obj.save()
            elif isinstance(obj, DomainRecord) and obj.is_new_record:
                if not obj.save():
                    msg = f"Unable to save {type(obj).__name__}"
                    raise PersistenceError(msg)

    def assure_safety(self, other: Any = None) -> AccessControlCollection | None:
        """Resolve *other* to a collection of this role, then persist both.

        Returns the resolved collection (None when *other* is None).
        """
        if other is None:
            self._assure_saved(self)
            return None
        resolved = self.load_object(other)
        self._assure_saved(self, resolved)
        return resolved

    def load_object(self, identifier: Any) -> AccessControlCollection:
        """Resolve *identifier* to one collection of this collection's role."""
        return self._store.resolver.resolve(identifier, self.role, only_first=True)

    def load_objects(
        self, identifier: Any, *, only_first: bool = False
    ) -> list[AccessControlCollection] | AccessControlCollection:
        return self._store.resolver.resolve(identifier, self.role, only_first=only_first)

    def get_associated_object(self) -> Any:
        """Load the wrapped domain record through the store's loaders.

        Returns None for pure groups and for models without a loader.
        """
        if self.model is None:
            return None
        loader = self._store.record_loader(self.model)
        if loader is None:
            return None
        return loader(self.foreign_key)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def _nodes(self, *criteria: ColumnElement[bool]) -> list[AclNode]:
        nodes = self.tables.nodes
        stmt = select(nodes).where(*criteria).order_by(nodes.c.id)
        with self._store.transaction() as conn:
            rows = conn.execute(stmt).fetchall()
        return [self.node_type.from_row(row, self.role) for row in rows]

    def get_nodes(self) -> list[AclNode]:
        """All nodes owned by this collection."""
        return self._nodes(self.tables.nodes.c.collection_id == self._id)

    def get_free_nodes(self) -> list[AclNode]:
        """Nodes of this collection that have no parent."""
        nodes = self.tables.nodes
        return self._nodes(nodes.c.collection_id == self._id, nodes.c.parent_id.is_(None))

    def fetch_comprised_positions(self) -> list[Any]:
        """Position markers of every node, the input of the position check."""
        return [node.position for node in self.get_nodes()]

    def get_direct_child_nodes(self, child: AccessControlCollection | None = None) -> list[AclNode]:
        """Nodes whose parent is one of ours, optionally owned by *child*."""
        nodes = self.tables.nodes
        mine = select(nodes.c.id).where(nodes.c.collection_id == self._id)
        criteria = [nodes.c.parent_id.in_(mine)]
        if child is not None:
            criteria.append(nodes.c.collection_id == child.id)
        return self._nodes(*criteria)

    def get_direct_parent_nodes(
        self, parent: AccessControlCollection | None = None
    ) -> list[AclNode]:
        """Nodes that are the parent of one of ours, optionally owned by *parent*."""
        nodes = self.tables.nodes
        parent_ids = select(nodes.c.parent_id).where(
            nodes.c.collection_id == self._id,
            nodes.c.parent_id.is_not(None),
        )
        criteria = [nodes.c.id.in_(parent_ids)]
        if parent is not None:
            criteria.append(nodes.c.collection_id == parent.id)
        return self._nodes(*criteria)

    def get_child_objects(self) -> list[Self]:
        """Collections one hop below, each listed once."""
        # Several nodes may belong to the same collection.
        owners = {node.collection_id: None for node in self.get_direct_child_nodes()}
        return type(self).find_by_pks(self._store, owners)

    def get_parent_objects(self) -> list[Self]:
        """Collections one hop above, each listed once."""
        owners = {node.collection_id: None for node in self.get_direct_parent_nodes()}
        return type(self).find_by_pks(self._store, owners)

    def create_node(self, parent: AclNode | None = None) -> AclNode:
        """Allocate a new node of this collection, under *parent* if given.

        Members below an existing node are copied below the new one, so
        every node of a collection carries the same descendants.
        """
        self._assure_saved(self)
        with self._store.transaction():
            existing = self.get_nodes()
            node = self._insert_node(self._id, parent)
            if existing:
                self._copy_subtree(existing[0], node)
        logger.debug(
            "Node %s created for %s %s under %s", node.id, self.role, self.label, node.parent_id
        )
        return node

    def _children_of(self, node: AclNode) -> list[AclNode]:
        return self._nodes(self.tables.nodes.c.parent_id == node.id)

    def _copy_subtree(self, source: AclNode, target: AclNode) -> None:
        """Recreate the descendants of *source* underneath *target*."""
        for child in self._children_of(source):
            copy = self._insert_node(child.collection_id, target)
            self._copy_subtree(child, copy)

    def _delete_subtree(self, node: AclNode) -> None:
        doomed: list[int] = []
        frontier = [node]
        while frontier:
            current = frontier.pop()
            doomed.append(current.id)
            frontier.extend(self._children_of(current))
        nodes = self.tables.nodes
        with self._store.transaction() as conn:
            conn.execute(delete(nodes).where(nodes.c.id.in_(doomed)))

    def _count_nodes(self) -> int:
        nodes = self.tables.nodes
        stmt = select(func.count(nodes.c.id)).where(nodes.c.collection_id == self._id)
        with self._store.transaction() as conn:
            return int(conn.execute(stmt).scalar_one())

    # ------------------------------------------------------------------
    # Strategy hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _insert_node(self, collection_id: int | None, parent: AclNode | None) -> AclNode:
        """Insert a node owned by *collection_id* under *parent*."""

    @abstractmethod
    def _move_node(self, node: AclNode, parent: AclNode | None) -> None:
        """Re-parent *node*; its whole subtree follows."""

    def add_position_check(
        self,
        positions: Iterable[Any],
        table: FromClause | str = "t",
        role: Role | str | None = None,
    ) -> ColumnElement[bool]:
        """Clause matching every node row at or above *positions*."""
        return self._store.strategy.add_position_check(positions, role or self.role, table)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def _group(self, other: Any) -> AccessControlCollection:
        """Resolve and persist the group side of a membership operation."""
        if other is None:
            msg = f"A group is required to relate {self.label!r} to"
            raise InvalidIdentifier(msg)
        group = self.assure_safety(other)
        assert group is not None
        return group

    def join(self, other: Any) -> bool:
        """Become a (direct) member of the group *other*.

        A node of ours is placed under every node of the group. Joining a
        group we already belong to changes nothing.

        Raises:
            CycleError: If the group is this collection or lies below it.
            RoleMismatch: If the group belongs to the other role.
            InvalidIdentifier: If *other* is None or not an identifier.
            UnknownIdentifier: Strict mode and the group does not exist.
        """
        with self._store.transaction():
            group = self._group(other)
            if group.is_(self):
                msg = f"{group.label!r} is already below {self.label!r}"
                raise CycleError(msg)

            attached = {node.parent_id for node in self.get_nodes()}
            for parent in group.get_nodes():
                if parent.id in attached:
                    continue
                # A free node only stands for the whole collection when it is the only one.
                mine = self.get_nodes()
                if len(mine) == 1 and mine[0].is_free:
                    self._move_node(mine[0], parent)
                else:
                    self.create_node(parent)
                attached.add(parent.id)
        logger.debug("%s joined %s", self.label, group.label)
        return True

    def leave(self, other: Any) -> bool:
        """Stop being a direct member of *other*. Missing memberships are a no-op."""
        with self._store.transaction():
            group = self._group(other)
            group_nodes = {node.id for node in group.get_nodes()}
            for node in self.get_nodes():
                if node.parent_id not in group_nodes:
                    continue
                if self._count_nodes() > 1:
                    self._delete_subtree(node)
                else:
                    self._move_node(node, None)
        logger.debug("%s left %s", self.label, group.label)
        return True

    def is_(self, other: Any) -> bool:
        """Whether this collection is *other* or lies (transitively) below it."""
        with self._store.transaction() as conn:
            group = self._group(other)
            nodes = self.tables.nodes
            check = self.add_position_check(self.fetch_comprised_positions(), nodes)
            stmt = select(nodes.c.id).where(nodes.c.collection_id == group.id, check).limit(1)
            return conn.execute(stmt).first() is not None


class ResourceCollection(AccessControlCollection):
    """A group of protected resources (access-control object)."""

    role = Role.RESOURCE


class RequestorCollection(AccessControlCollection):
    """A group of requesting actors (access-control requestor)."""

    role = Role.REQUESTOR
