"""Entity layer — collections, nodes and the identifier resolver."""

from acltree.models.collection import (
    AccessControlCollection,
    RequestorCollection,
    ResourceCollection,
)
from acltree.models.node import AclNode
from acltree.models.resolver import IdentifierResolver

__all__ = [
    "AccessControlCollection",
    "AclNode",
    "IdentifierResolver",
    "RequestorCollection",
    "ResourceCollection",
]
