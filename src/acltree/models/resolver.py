"""IdentifierResolver — loosely-typed references to persisted collections.

Resolution order follows the identifier form (see
:mod:`acltree.domain.identifiers`):

1. Alias — lookup by alias; created if missing unless strict.
2. ExternalRef — lookup by ``(model, foreign_key)``; created if missing
   unless strict.
3. CollectionRef — used as-is once its role is checked and it is saved.
4. RecordRef — the record is saved if new, then resolved as form 2.

With ``only_first`` the oldest match (lowest id) is returned; otherwise
all matches, oldest first. At most one write happens per unknown
identifier, and existing collections are never modified.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from acltree.domain.errors import (
    InvalidIdentifier,
    PersistenceError,
    RoleMismatch,
    UnknownIdentifier,
)
from acltree.domain.identifiers import (
    Alias,
    CollectionRef,
    ExternalRef,
    RecordRef,
    coerce_identifier,
)
from acltree.domain.records import record_model_name
from acltree.domain.types import Role
from acltree.models.collection import AccessControlCollection

if TYPE_CHECKING:
    from acltree.infrastructure.store import Store

logger = logging.getLogger(__name__)

type RoleSpec = Role | str | type[AccessControlCollection]


class IdentifierResolver:
    """Turns identifiers into collections of the store's active strategy."""

    def __init__(self, store: Store) -> None:
        self._store = store

    def collection_type(self, role: RoleSpec) -> type[AccessControlCollection]:
        """Concrete collection class for a role, role name, or class."""
        registry = self._store.registry
        if isinstance(role, type):
            resolved = role
        elif isinstance(role, Role) or role in {r.value for r in Role}:
            resolved = registry.collection_type(role)
        else:
            resolved = registry.resolve_type(role)

        if not issubclass(resolved, AccessControlCollection) or getattr(
            resolved, "__abstractmethods__", None
        ):
            msg = f"{role!r} does not name a concrete collection type"
            raise ValueError(msg)
        return resolved

    def resolve(
        self,
        identifier: Any,
        role: RoleSpec,
        *,
        only_first: bool = True,
    ) -> Any:
        """Resolve *identifier* to a collection (or a list with ``only_first=False``).

        Raises:
            InvalidIdentifier: Unsupported identifier shape.
            RoleMismatch: A collection of another role or strategy was passed.
            UnknownIdentifier: Strict mode and nothing matches.
            PersistenceError: A required save failed.
        """
        collection_type = self.collection_type(role)
        ident = coerce_identifier(identifier, collection_type=AccessControlCollection)

        match ident:
            case Alias(name=name):
                return self._lookup(collection_type, {"alias": name}, only_first)
            case ExternalRef(model=model, foreign_key=foreign_key):
                filters = {"model": model, "foreign_key": foreign_key}
                return self._lookup(collection_type, filters, only_first)
            case CollectionRef(collection=collection):
                self._check_compatible(collection, collection_type)
                if collection.is_new_record:
                    collection.save()
                return collection if only_first else [collection]
            case RecordRef(record=record):
                if record.is_new_record and not record.save():
                    msg = f"Unable to save {type(record).__name__}"
                    raise PersistenceError(msg)
                if record.primary_key is None:
                    msg = f"{type(record).__name__} has no primary key after saving"
                    raise PersistenceError(msg)
                ref = ExternalRef(model=record_model_name(record), foreign_key=record.primary_key)
                return self.resolve(ref, collection_type, only_first=only_first)
            case _:
                msg = f"Unknown ACL collection identifier: {identifier!r}"
                raise InvalidIdentifier(msg)

    def _lookup(
        self,
        collection_type: type[AccessControlCollection],
        filters: dict[str, Any],
        only_first: bool,
    ) -> Any:
        with self._store.transaction():
            found = collection_type.find_all(self._store, **filters)
            if not found:
                if self._store.registry.strict_mode:
                    described = ", ".join(f"{k}={v!r}" for k, v in filters.items())
                    msg = f"Unknown {collection_type.role} collection ({described})"
                    raise UnknownIdentifier(msg)
                created = collection_type(self._store, **filters)
                created.save()
                logger.debug("Auto-created %s collection %s", created.role, created.label)
                found = [created]
        return found[0] if only_first else found

    def _check_compatible(
        self,
        collection: AccessControlCollection,
        collection_type: type[AccessControlCollection],
    ) -> None:
        if collection.role != collection_type.role:
            msg = (
                f"{collection.label!r} is a {collection.role} collection, "
                f"expected {collection_type.role}"
            )
            raise RoleMismatch(msg)
        if not isinstance(collection, collection_type):
            msg = (
                f"{type(collection).__name__} does not belong to strategy "
                f"{self._store.registry.name!r}"
            )
            raise RoleMismatch(msg)
        if collection.store is not self._store:
            msg = f"{collection.label!r} is bound to a different store"
            raise RoleMismatch(msg)
