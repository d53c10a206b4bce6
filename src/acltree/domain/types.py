"""Roles and role names shared by every strategy."""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """The two sides of an access decision."""

    RESOURCE = "resource"
    REQUESTOR = "requestor"

    @property
    def collection_role(self) -> str:
        """Logical role name of the collection type for this side."""
        return f"{self.value}-collection"

    @property
    def group_role(self) -> str:
        """Reserved shortcut name bound to the concrete collection type."""
        return f"{self.value}-group"


# Logical role names every strategy must bind.
RESOURCE_COLLECTION = Role.RESOURCE.collection_role
REQUESTOR_COLLECTION = Role.REQUESTOR.collection_role
NODE = "node"

STRATEGY_ROLES: frozenset[str] = frozenset({RESOURCE_COLLECTION, REQUESTOR_COLLECTION, NODE})

# Reserved names: never prefixed, identical under every strategy.
ACL_OBJECT = "acl-object"
RESOURCE_GROUP = Role.RESOURCE.group_role
REQUESTOR_GROUP = Role.REQUESTOR.group_role

GLOBAL_ROLES: frozenset[str] = frozenset({ACL_OBJECT, RESOURCE_GROUP, REQUESTOR_GROUP})
